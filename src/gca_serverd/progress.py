"""Shutdown progress reporting."""

import asyncio
import logging
import sys
from typing import TextIO


_log = logging.getLogger("progress")


def format_seconds(value: float) -> str:
    """Render a duration for the console: ``5``, ``1000000``, ``0.25``.

    Whole values are printed as integers at any magnitude, fractional ones
    with float noise from ``n * interval`` rounded away.
    """
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.12g}"


class ProgressReporter:
    """Prints cumulative elapsed time while the server is shutting down.

    Lines are printed at T+interval, T+2*interval, ... where T is the moment
    ``start()`` is called. There is no end condition: the reporter runs until
    ``stop()`` is called or the process exits.
    """

    def __init__(self, interval: float = 5.0, out: TextIO | None = None):
        if interval <= 0:
            raise ValueError(f"Progress interval must be positive, got {interval}")
        self.interval = interval
        self.out = out
        self._task: asyncio.Task | None = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        """Number of progress lines printed so far."""
        return self._ticks

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start reporting in a background task.

        Raises:
            RuntimeError: If the reporter was already started
        """
        if self._task is not None:
            raise RuntimeError("Progress reporter already started")
        self._task = asyncio.create_task(self._run(), name="shutdown-progress")

    async def stop(self):
        """Cancel the reporting task."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self):
        loop = asyncio.get_running_loop()
        started = loop.time()
        while True:
            deadline = started + (self._ticks + 1) * self.interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            self._ticks += 1
            elapsed = self._ticks * self.interval
            print(f"{format_seconds(elapsed)} seconds", file=self.out or sys.stdout, flush=True)
            _log.debug(f"Shutdown in progress for {format_seconds(elapsed)}s")

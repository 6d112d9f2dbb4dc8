"""Signal listener turning SIGINT/SIGTERM into a single shutdown event."""

import asyncio
import logging
import signal


_log = logging.getLogger("signals")

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalListener:
    """One-shot shutdown notification fed by OS termination signals.

    Both signal kinds collapse into one event. The first signal resolves
    ``wait()``; any later one is ignored.

    Register before waiting, otherwise a signal arriving in between is lost:

        listener = SignalListener()
        listener.register()
        sig = await listener.wait()
    """

    def __init__(self, signals: tuple[signal.Signals, ...] = SHUTDOWN_SIGNALS):
        self.signals = signals
        self._loop: asyncio.AbstractEventLoop | None = None
        self._received: asyncio.Future | None = None
        self._fallback = False

    @property
    def is_registered(self) -> bool:
        return self._loop is not None

    @property
    def received(self) -> signal.Signals | None:
        """Signal that triggered shutdown, None if none arrived yet."""
        if self._received is None or not self._received.done():
            return None
        return self._received.result()

    def register(self, loop: asyncio.AbstractEventLoop | None = None):
        """Install handlers for shutdown signals on the event loop.

        Raises:
            RuntimeError: If the listener is already registered
        """
        if self._loop is not None:
            raise RuntimeError("Signal listener already registered")
        if loop is None:
            loop = asyncio.get_running_loop()

        self._loop = loop
        self._received = loop.create_future()

        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.notify, sig)
            except NotImplementedError:
                # Event loop without signal support (Windows)
                signal.signal(sig, self._handle_fallback)
                self._fallback = True

        _log.debug(f"Listening for {', '.join(s.name for s in self.signals)}")

    def unregister(self):
        """Remove installed handlers and restore default signal dispositions."""
        if self._loop is None:
            return
        for sig in self.signals:
            if self._fallback:
                signal.signal(sig, signal.SIG_DFL)
            else:
                self._loop.remove_signal_handler(sig)
        self._loop = None
        self._fallback = False

    def notify(self, sig: signal.Signals = signal.SIGTERM):
        """Deliver shutdown request; only the first one counts."""
        if self._received is None:
            raise RuntimeError("Signal listener is not registered")
        if self._received.done():
            _log.debug(f"Received {sig.name} while already shutting down, ignoring")
            return
        _log.info(f"Received signal {sig.name}")
        self._received.set_result(sig)

    def _handle_fallback(self, signum, frame):
        self._loop.call_soon_threadsafe(self.notify, signal.Signals(signum))

    async def wait(self) -> signal.Signals:
        """Block until the first shutdown signal, without timeout.

        Raises:
            RuntimeError: If called before ``register()``
        """
        if self._received is None:
            raise RuntimeError("Signal listener must be registered before waiting")
        return await asyncio.shield(self._received)

"""Lifecycle supervisor for the GCA server.

The supervisor:
- constructs the server from the launch configuration
- waits, without polling, for SIGINT/SIGTERM
- runs exactly one graceful shutdown, reporting progress while the
  server's blocking ``close()`` is in flight
"""

import asyncio
import inspect
import logging
import sys
import time
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler

from gca_serverd.config import LaunchConfiguration, SupervisorSettings
from gca_serverd.errors import ServerLaunchError, StartupError
from gca_serverd.progress import ProgressReporter, format_seconds
from gca_serverd.registry import ManagedServer, ServerFactory
from gca_serverd.signals import SignalListener


EXIT_OK = 0

TEST_MODE_NOTICE = "This server is using internal test mode, and should not be used in production."


class Supervisor:
    """Starts the GCA server, keeps the process alive and shuts it down once."""

    def __init__(
        self,
        launch_config: LaunchConfiguration,
        server_factory: ServerFactory,
        settings: SupervisorSettings | None = None,
        listener: SignalListener | None = None,
        out: TextIO | None = None
    ):
        self.launch_config = launch_config
        self.server_factory = server_factory
        self.settings = settings or SupervisorSettings()
        self.listener = listener or SignalListener()
        self.out = out
        self.logger = logging.getLogger(f"sup|{launch_config.server_dir.name}")
        self.server: ManagedServer | None = None
        self.reporter: ProgressReporter | None = None
        self._shutdown_started = False

    @staticmethod
    def setup_logging(level: int = logging.INFO, use_color: bool | None = None):
        """Setup logging on stderr, stdout is reserved for operator messages.

        Args:
            level: Root logging level
            use_color: If True, use Rich colored logging; if False, use plain
                       text; None picks colors when stderr is a terminal
        """
        if use_color is None:
            use_color = sys.stderr.isatty()

        if not use_color:
            logging.basicConfig(
                level=level,
                format='%(asctime)s.%(msecs)03d [%(levelname)-5s] [%(name)-15s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S',
                stream=sys.stderr
            )
        else:
            logging.basicConfig(
                level=level,
                format='%(message)s',
                handlers=[RichHandler(
                    console=Console(stderr=True),
                    show_time=True,
                    show_level=True,
                    show_path=False,
                    rich_tracebacks=True,
                    tracebacks_show_locals=False,
                    log_time_format='%Y-%m-%d %H:%M:%S'
                )]
            )

    @property
    def is_shutting_down(self) -> bool:
        return self._shutdown_started

    def _print(self, text: str = ""):
        print(text, file=self.out or sys.stdout, flush=True)

    async def start_server(self) -> ManagedServer:
        """Construct the server from the launch configuration.

        Raises:
            ServerLaunchError: If the factory fails or returns an object
                without a callable ``close``
        """
        server_dir = self.launch_config.server_dir
        self.logger.info(f"Launching GCA server in {server_dir}")
        try:
            server: Any = self.server_factory(server_dir, self.launch_config.internal_test_mode)
            if inspect.isawaitable(server):
                server = await server
        except StartupError:
            raise
        except Exception as e:
            raise ServerLaunchError(str(e) or type(e).__name__) from e

        if not callable(getattr(server, "close", None)):
            raise ServerLaunchError(
                f"server factory returned {type(server).__name__} without a close() method"
            )

        self.server = server
        self.logger.info("GCA server started")
        return server

    def announce_test_mode(self):
        if self.launch_config.internal_test_mode:
            self._print(TEST_MODE_NOTICE)

    async def run(self) -> int:
        """Start the server, wait for a shutdown signal and shut down.

        Returns:
            Process exit code, always EXIT_OK once the server was started

        Raises:
            ServerLaunchError: If the server could not be started
        """
        await self.start_server()
        self.announce_test_mode()

        # Signals stay handled for the whole shutdown, so repeated requests
        # cannot interrupt it.
        self.listener.register()
        try:
            self.logger.info("GCA server running. Press Ctrl+C to stop.")
            await self.listener.wait()
            return await self.shutdown()
        finally:
            self.listener.unregister()

    async def shutdown(self) -> int:
        """Close the server while reporting progress.

        Close errors are logged but never change the outcome.

        Raises:
            RuntimeError: If no server was started or shutdown already ran
        """
        if self.server is None:
            raise RuntimeError("Cannot shut down, server was not started")
        if self._shutdown_started:
            raise RuntimeError("Shutdown already started")
        self._shutdown_started = True

        self._print(
            f"Close signal received, shutting down server. "
            f"ETA {format_seconds(self.settings.shutdown_eta)} seconds."
        )
        self.reporter = ProgressReporter(self.settings.progress_interval, out=self.out)
        self.reporter.start()

        started = time.monotonic()
        try:
            await self._close_server()
        except Exception:
            self.logger.error("GCA server failed while closing", exc_info=True)
        finally:
            await self.reporter.stop()

        self.logger.info(f"GCA server closed after {time.monotonic() - started:.1f}s")
        self._print()
        return EXIT_OK

    async def _close_server(self):
        close = self.server.close
        if inspect.iscoroutinefunction(close):
            await close()
            return
        # Blocking close runs in a worker thread so progress keeps ticking
        result = await asyncio.to_thread(close)
        if inspect.isawaitable(result):
            await result

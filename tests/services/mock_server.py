"""Mock GCA servers for supervisor tests.

Every server records its lifecycle in ``<server_dir>/mock_server.log`` so
tests driving the daemon in a subprocess can see what happened inside it.

Factories are referenced from ``supervisor.yaml``, e.g.:

    server_factory: tests.services.mock_server:new_slow_server
"""

import asyncio
import time
from pathlib import Path


LOG_FILE_NAME = "mock_server.log"


class MockServer:
    """Server with a blocking close()."""

    def __init__(self, server_dir: Path, internal_test_mode: bool, close_delay: float = 0.0):
        self.server_dir = Path(server_dir)
        self.internal_test_mode = internal_test_mode
        self.close_delay = close_delay
        self.close_calls = 0
        self.server_dir.mkdir(parents=True, exist_ok=True)
        self._record(f"started dir={self.server_dir} internal_test_mode={internal_test_mode}")

    def _record(self, event: str):
        with open(self.server_dir / LOG_FILE_NAME, "a") as f:
            f.write(event + "\n")

    def close(self):
        self.close_calls += 1
        self._record("close begin")
        time.sleep(self.close_delay)
        self._record("close end")


class AsyncMockServer(MockServer):
    """Server with a coroutine close()."""

    async def close(self):
        self.close_calls += 1
        self._record("close begin")
        await asyncio.sleep(self.close_delay)
        self._record("close end")


def new_mock_server(server_dir, internal_test_mode):
    return MockServer(server_dir, internal_test_mode)


def new_slow_server(server_dir, internal_test_mode):
    return MockServer(server_dir, internal_test_mode, close_delay=1.3)


async def new_async_server(server_dir, internal_test_mode):
    return AsyncMockServer(server_dir, internal_test_mode, close_delay=0.2)


def new_failing_server(server_dir, internal_test_mode):
    raise RuntimeError("database is locked")


def read_events(server_dir: Path) -> list[str]:
    """Lifecycle events recorded by mock servers in ``server_dir``."""
    log_file = Path(server_dir) / LOG_FILE_NAME
    if not log_file.exists():
        return []
    return log_file.read_text().splitlines()

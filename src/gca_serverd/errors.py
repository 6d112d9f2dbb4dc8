"""Startup error taxonomy for the GCA server supervisor.

Every error raised before the server is running is fatal. The launcher
reports it as a single line prefixed with ``prefix`` and exits non-zero.
"""


class StartupError(Exception):
    """Base exception for failures before the server is running."""
    prefix: str = "Startup failed"

    def describe(self) -> str:
        """Operator-facing diagnostic line."""
        return f"{self.prefix}: {self}"


class HomeDirectoryError(StartupError):
    """Raised when the invoking user's home directory cannot be resolved."""
    prefix = "Error obtaining user's home directory"


class ConfigError(StartupError):
    """Raised when the supervisor settings file is unreadable or invalid."""
    prefix = "Unable to load supervisor settings"


class ServerLaunchError(StartupError):
    """Raised when the GCA server cannot be constructed."""
    prefix = "Unable to launch GCA server"


class ServerFactoryError(ServerLaunchError):
    """Raised when the server factory reference cannot be resolved."""
    pass

"""Launch configuration and supervisor settings.

The launch configuration (server directory, internal test mode) is derived
once from the environment and argv. Optional supervisor settings are read
from ``supervisor.yaml`` inside the server directory.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from gca_serverd.errors import ConfigError, HomeDirectoryError


_logger = logging.getLogger("config")

SERVER_DIR_NAME = "gca-server"
INTERNAL_TEST_FLAG = "--internal-test"
SETTINGS_FILE_NAME = "supervisor.yaml"

DEFAULT_SERVER_FACTORY = "gca_backend.server:new_gca_server"
DEFAULT_SHUTDOWN_ETA = 90.0  # [s] advisory only, never enforced
DEFAULT_PROGRESS_INTERVAL = 5.0  # [s]


def resolve_home_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the invoking user's home directory.

    On POSIX the home directory is ``$HOME`` and nothing else; on Windows it
    is ``%USERPROFILE%``.

    Args:
        environ: Environment mapping to consult (defaults to ``os.environ``)

    Raises:
        HomeDirectoryError: If the variable is unset or empty
    """
    if environ is None:
        environ = os.environ

    if os.name == "nt":
        home = environ.get("USERPROFILE")
        if not home:
            raise HomeDirectoryError("%userprofile% is not defined")
    else:
        home = environ.get("HOME")
        if not home:
            raise HomeDirectoryError("$HOME is not defined")
    return Path(home)


def parse_internal_test_flag(argv: Sequence[str]) -> bool:
    """Internal test mode requires exactly one argument equal to ``--internal-test``.

    Any other argument configuration means test mode is disabled; it is
    never an error.
    """
    return len(argv) == 1 and argv[0] == INTERNAL_TEST_FLAG


@dataclass(frozen=True)
class LaunchConfiguration:
    """Immutable startup parameters of the supervised server."""
    server_dir: Path
    internal_test_mode: bool = False

    @classmethod
    def from_environment(
        cls,
        argv: Sequence[str],
        environ: Mapping[str, str] | None = None
    ) -> "LaunchConfiguration":
        """Build configuration from command line arguments (without program name)."""
        home = resolve_home_dir(environ)
        return cls(
            server_dir=home / SERVER_DIR_NAME,
            internal_test_mode=parse_internal_test_flag(argv)
        )

    @property
    def settings_file(self) -> Path:
        return self.server_dir / SETTINGS_FILE_NAME


@dataclass
class SupervisorSettings:
    """Optional overrides read from ``supervisor.yaml``.

    Attributes:
        server_factory: ``module:attribute`` reference of the server factory
        shutdown_eta: Shutdown estimate shown to the operator (seconds)
        progress_interval: Delay between shutdown progress lines (seconds)
        log_level: Logging level; None means INFO in internal test mode,
                   WARNING otherwise
        color: Rich colored logging; None means auto (stderr is a TTY)
    """
    server_factory: str = DEFAULT_SERVER_FACTORY
    shutdown_eta: float = DEFAULT_SHUTDOWN_ETA
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL
    log_level: str | None = None
    color: bool | None = None

    # Settings file the values came from, not a setting itself
    source = None

    def __post_init__(self):
        if not isinstance(self.server_factory, str) or not self.server_factory:
            raise ConfigError("server_factory must be a non-empty string")
        for name in ("shutdown_eta", "progress_interval"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value!r}")
        if self.log_level is not None:
            level = logging.getLevelName(str(self.log_level).upper())
            if not isinstance(level, int):
                raise ConfigError(f"Unknown log_level: {self.log_level!r}")
        if self.color is not None and not isinstance(self.color, bool):
            raise ConfigError(f"color must be true or false, got {self.color!r}")

    def effective_log_level(self, internal_test_mode: bool) -> int:
        """Resolve logging level, internal test mode raises verbosity to INFO."""
        if self.log_level is not None:
            return logging.getLevelName(str(self.log_level).upper())
        return logging.INFO if internal_test_mode else logging.WARNING

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SupervisorSettings":
        bad_keys = [key for key in data if not isinstance(key, str)]
        if bad_keys:
            raise ConfigError(
                f"Setting names must be strings, got {', '.join(map(repr, bad_keys))}"
            )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**data)


def load_settings(path: Path) -> SupervisorSettings:
    """Load supervisor settings from YAML file, missing file means defaults.

    The returned settings carry the file they were read from in ``source``
    (None when defaults were used).

    Raises:
        ConfigError: If the file cannot be read or does not describe
            valid settings
    """
    try:
        if not path.exists():
            _logger.debug(f"No settings file at {path}, using defaults")
            return SupervisorSettings()
        # PyYAML detects the encoding of a binary stream
        with open(path, "rb") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"{path}: {e}") from e

    if data is None:
        settings = SupervisorSettings()
    elif not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping, got {type(data).__name__}")
    else:
        try:
            settings = SupervisorSettings.from_dict(data)
        except ConfigError as e:
            raise ConfigError(f"{path}: {e}") from e

    settings.source = path
    return settings

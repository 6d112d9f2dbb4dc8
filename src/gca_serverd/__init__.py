"""gca-serverd - process lifecycle supervisor for the GCA server."""

from gca_serverd.config import LaunchConfiguration, SupervisorSettings
from gca_serverd.errors import (
    ConfigError,
    HomeDirectoryError,
    ServerFactoryError,
    ServerLaunchError,
    StartupError,
)
from gca_serverd.progress import ProgressReporter
from gca_serverd.signals import SignalListener
from gca_serverd.supervisor import Supervisor

__version__ = "0.1.0"

__all__ = [
    "LaunchConfiguration",
    "SupervisorSettings",
    "StartupError",
    "HomeDirectoryError",
    "ConfigError",
    "ServerLaunchError",
    "ServerFactoryError",
    "ProgressReporter",
    "SignalListener",
    "Supervisor",
]

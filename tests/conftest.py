"""Pytest configuration for gca-serverd tests."""

from pathlib import Path

import pytest
import yaml

from gca_serverd.config import SERVER_DIR_NAME, SETTINGS_FILE_NAME


@pytest.fixture
def home_dir(tmp_path) -> Path:
    """Temporary home directory with an existing server directory."""
    home = tmp_path / "home"
    (home / SERVER_DIR_NAME).mkdir(parents=True)
    return home


@pytest.fixture
def server_dir(home_dir) -> Path:
    return home_dir / SERVER_DIR_NAME


@pytest.fixture
def write_settings(server_dir):
    """Write ``supervisor.yaml`` into the temporary server directory."""
    def _write(**settings) -> Path:
        path = server_dir / SETTINGS_FILE_NAME
        with open(path, "w") as f:
            yaml.safe_dump(settings, f)
        return path
    return _write

"""Default locations of copygit's files."""

from __future__ import annotations

import os
from pathlib import Path


def default_config_dir() -> Path:
    """Return $COPYGIT_HOME, or ~/.copygit."""
    home = os.environ.get("COPYGIT_HOME")
    if home:
        return Path(home)
    try:
        return Path.home() / ".copygit"
    except RuntimeError:
        return Path(".copygit")


def default_config_path() -> Path:
    return default_config_dir() / "config"


def default_repo_registry_path() -> Path:
    return default_config_dir() / "repos.toml"


def default_queue_dir() -> Path:
    return default_config_dir() / "queue"


def default_credentials_path() -> Path:
    return default_config_dir() / "credentials"


def default_lock_path() -> Path:
    return default_config_dir() / "lock"


def default_pid_file_path() -> Path:
    return default_config_dir() / "daemon.pid"


def default_state_dir() -> Path:
    return default_config_dir() / "state"
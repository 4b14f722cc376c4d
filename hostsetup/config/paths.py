"""Config and log path helpers."""

from __future__ import annotations

import os
from pathlib import Path


def config_dir() -> Path:
    """Return the directory used for rvm-host-setup configuration.

    Priority:
    - RVM_SETUP_CONFIG_DIR
    - XDG_CONFIG_HOME/rvm-host-setup
    - ~/.config/rvm-host-setup
    """

    p = os.environ.get("RVM_SETUP_CONFIG_DIR")
    if p:
        return Path(p)

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "rvm-host-setup"

    return Path.home() / ".config" / "rvm-host-setup"


def config_file_path() -> Path:
    """Return the config.json path.

    Priority:
    - RVM_SETUP_CONFIG_PATH (explicit file override)
    - config_dir()/config.json
    """

    p = os.environ.get("RVM_SETUP_CONFIG_PATH")
    if p:
        return Path(p)
    return config_dir() / "config.json"


def log_dir() -> Path:
    """Return the directory for per-step logs and the run summary.

    Priority:
    - RVM_SETUP_LOG_DIR
    - XDG_STATE_HOME/rvm-host-setup/logs
    - ~/.local/state/rvm-host-setup/logs
    """

    p = os.environ.get("RVM_SETUP_LOG_DIR")
    if p:
        return Path(p)

    xdg = os.environ.get("XDG_STATE_HOME")
    if xdg:
        return Path(xdg) / "rvm-host-setup" / "logs"

    return Path.home() / ".local" / "state" / "rvm-host-setup" / "logs"

"""Where tektontree looks for config files.

- Windows: %PROGRAMDATA%\\tektontree (system), %APPDATA%\\tektontree (user)
- Unix: /etc/tektontree (system), $XDG_CONFIG_HOME/tektontree or ~/.config/tektontree (user)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "tektontree"


def get_system_config_path() -> Path | None:
    """Machine-wide config file. It may not exist."""
    if sys.platform == "win32":
        program_data = os.environ.get("PROGRAMDATA")
        return Path(program_data) / APP_NAME / CONFIG_FILENAME if program_data else None
    return Path("/etc") / APP_NAME / CONFIG_FILENAME


def get_user_config_path() -> Path | None:
    """Per-user config file. It may not exist."""
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA")
        return Path(app_data) / APP_NAME / CONFIG_FILENAME if app_data else None
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(config_home) / APP_NAME / CONFIG_FILENAME


def get_config_paths() -> list[Path]:
    """Config files in merge order; later files override earlier ones."""
    return [p for p in (get_system_config_path(), get_user_config_path()) if p is not None]

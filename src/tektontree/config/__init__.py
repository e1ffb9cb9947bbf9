"""Configuration management for tektontree.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/tektontree/ or %PROGRAMDATA%)
- User-level config ($XDG_CONFIG_HOME/tektontree/, ~/.config/tektontree/ or %APPDATA%)
- Environment variable overrides (highest priority)

Example usage:
    from tektontree.config import load_config

    config = load_config()
    print(config.tree.page_size)
"""

from tektontree.config.loader import (
    deep_merge,
    get_config,
    load_config,
    reset_config,
)
from tektontree.config.paths import (
    get_config_paths,
    get_system_config_path,
    get_user_config_path,
)
from tektontree.config.schema import (
    Config,
    LoggingConfig,
    ToolsConfig,
    TreeConfig,
)

__all__ = [
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    "deep_merge",
    "TreeConfig",
    "ToolsConfig",
    "LoggingConfig",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
]

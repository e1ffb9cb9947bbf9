"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Cascading merge of system and user files
- Environment variable overrides
- Conversion from dict to typed Config dataclass, with validation
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from tektontree.config.paths import get_config_paths
from tektontree.config.schema import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_PAGE_SIZE,
    Config,
    LoggingConfig,
    ToolsConfig,
    TreeConfig,
)

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("tektontree.config")

_cached_config: Config | None = None

_KNOWN_SECTIONS = {"tree", "tools", "logging"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Nested dicts merge recursively, lists and scalars are replaced, and a
    None in ``override`` leaves the base value untouched.
    """
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def env_overrides() -> dict[str, Any]:
    """Build a config dict from TEKTONTREE_* environment variables."""
    overrides: dict[str, Any] = {}

    def put(section: str, key: str, value: Any) -> None:
        overrides.setdefault(section, {})[key] = value

    if log_path := os.environ.get("TEKTONTREE_LOG"):
        put("logging", "file", log_path)
    if page_size := os.environ.get("TEKTONTREE_PAGE_SIZE"):
        put("tree", "page_size", page_size)
    if verbosity := os.environ.get("TEKTONTREE_VERBOSITY"):
        put("tree", "output_verbosity", verbosity)
    if tkn := os.environ.get("TEKTONTREE_TKN"):
        put("tools", "tkn", tkn)
    if kubectl := os.environ.get("TEKTONTREE_KUBECTL"):
        put("tools", "kubectl", kubectl)

    return overrides


def _as_int(value: Any, default: int, *, minimum: int, name: str) -> int:
    """Coerce ``value`` to an int >= ``minimum``, falling back to ``default``."""
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        _log.warning("Ignoring non-integer %s: %r", name, value)
        return default
    if isinstance(value, bool) or number < minimum:
        _log.warning("Ignoring out-of-range %s: %r", name, value)
        return default
    return number


def _as_timeout(value: Any) -> float | None:
    if value is None:
        return DEFAULT_COMMAND_TIMEOUT
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        _log.warning("Ignoring invalid tree.command_timeout: %r", value)
        return DEFAULT_COMMAND_TIMEOUT
    return timeout if timeout > 0 else None


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass."""
    tree_data = data.get("tree") or {}
    tree = TreeConfig(
        page_size=_as_int(
            tree_data.get("page_size"), DEFAULT_PAGE_SIZE, minimum=1, name="tree.page_size"
        ),
        output_verbosity=_as_int(
            tree_data.get("output_verbosity"), 0, minimum=0, name="tree.output_verbosity"
        ),
        command_timeout=_as_timeout(tree_data.get("command_timeout")),
    )

    tools_data = data.get("tools") or {}
    tools = ToolsConfig(
        tkn=tools_data.get("tkn"),
        kubectl=tools_data.get("kubectl"),
    )

    log_data = data.get("logging") or {}
    verbose = log_data.get("verbose")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=None if verbose is None else _as_int(verbose, 2, minimum=0, name="logging.verbose"),
        file=log_data.get("file"),
    )

    extra = {k: v for k, v in data.items() if k not in _KNOWN_SECTIONS}

    return Config(tree=tree, tools=tools, logging=logging_config, extra=extra)


def load_config(
    config_file: Path | None = None,
    reload: bool = False,
) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Explicit config file (``--config``)
    3. User config
    4. System config

    Only the global config (no explicit file) is cached.
    """
    global _cached_config

    is_global = config_file is None
    if _cached_config is not None and not reload and is_global:
        return _cached_config

    paths = get_config_paths()
    if config_file is not None:
        paths.append(config_file)

    merged: dict[str, Any] = {}
    for path in paths:
        config_data = load_yaml_file(path)
        if config_data:
            _log.debug("Loaded config from %s", path)
            merged = deep_merge(merged, config_data)

    merged = deep_merge(merged, env_overrides())
    config = dict_to_config(merged)

    if is_global:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config. Useful for testing or forcing a reload."""
    global _cached_config
    _cached_config = None

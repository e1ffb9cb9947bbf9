"""Configuration schema dataclasses for tektontree.

All fields carry defaults so partial configs from any level merge cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_PAGE_SIZE = 5
DEFAULT_COMMAND_TIMEOUT = 60.0


@dataclass
class TreeConfig:
    """Tree synchronization settings.

    Example config.yaml:
        tree:
          page_size: 10
          output_verbosity: 0
          command_timeout: 60
    """

    page_size: int = DEFAULT_PAGE_SIZE  # Children shown before a "more" node
    output_verbosity: int = 0  # Appended as `-v N` to outgoing commands when > 0
    command_timeout: float | None = DEFAULT_COMMAND_TIMEOUT  # None = wait forever


@dataclass
class ToolsConfig:
    """Locations of the external command-line tools.

    When unset, the bare tool name is resolved through PATH.
    """

    tkn: str | None = None
    kubectl: str | None = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0..4, takes precedence over level
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    tree: TreeConfig = field(default_factory=TreeConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections, kept for forward compatibility
    extra: dict[str, Any] = field(default_factory=dict)

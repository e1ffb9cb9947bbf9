"""Command protocol and process execution for tkn / kubectl.

The tree engine never spawns processes itself; it builds CliCommand values
with Commands and hands them to a CommandExecutor.
"""

from tektontree.process.command import CliCommand, Commands, ToolFamily
from tektontree.process.executor import SubprocessCommandExecutor
from tektontree.process.protocol import CommandExecutor
from tektontree.process.result import ExitData
from tektontree.process.watch import WatchHandle

__all__ = [
    "CliCommand",
    "CommandExecutor",
    "Commands",
    "ExitData",
    "SubprocessCommandExecutor",
    "ToolFamily",
    "WatchHandle",
]

"""Executor protocol for running tkn / kubectl commands."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from tektontree.process.command import CliCommand
from tektontree.process.result import ExitData
from tektontree.process.watch import WatchHandle

OutputCallback = Callable[[str], None]
ExitCallback = Callable[["int | None"], None]


class CommandExecutor(Protocol):
    """Protocol for running commands.

    Implementations:
    - SubprocessCommandExecutor: local asyncio subprocesses
    - test fakes that map argument vectors to canned ExitData
    """

    async def execute(self, command: CliCommand, cwd: str | None = None) -> ExitData:
        """Run a command to completion and capture its output.

        Must not raise for process-level failures; those are reported
        through ``ExitData.succeeded`` / ``ExitData.error``.
        """
        ...

    def watch(
        self,
        command: CliCommand,
        on_output: OutputCallback,
        on_exit: ExitCallback | None = None,
    ) -> WatchHandle:
        """Start a long-running command, calling ``on_output`` per output line."""
        ...

    async def execute_in_terminal(self, command: CliCommand, cwd: str | None = None) -> int:
        """Run a command attached to the user's terminal and return its exit code."""
        ...

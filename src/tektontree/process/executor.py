"""Subprocess-based executor for tkn and kubectl commands."""

from __future__ import annotations

import asyncio
import os
import time

from tektontree.config.schema import ToolsConfig
from tektontree.logging import get_logger
from tektontree.process.command import CliCommand, ToolFamily
from tektontree.process.protocol import ExitCallback, OutputCallback
from tektontree.process.result import ExitData
from tektontree.process.watch import WatchHandle

log = get_logger("executor")


class SubprocessCommandExecutor:
    """Execute commands using asyncio subprocesses.

    Every command runs on the event loop; the calling task suspends until
    the process exits (or, for watches, keeps a pump task alive).
    """

    def __init__(
        self,
        tools: ToolsConfig | None = None,
        default_cwd: str | None = None,
        timeout: float | None = 60.0,
    ) -> None:
        """Initialize the executor.

        Args:
            tools: Configured tool locations. Unset tools resolve via PATH.
            default_cwd: Working directory for commands. None = current dir.
            timeout: Seconds before a captured command is killed. None = no limit.
        """
        self._tools = tools or ToolsConfig()
        self._default_cwd = default_cwd
        self._timeout = timeout

    def tool_location(self, tool: ToolFamily) -> str | None:
        """The configured path for a tool, if any."""
        match tool:
            case ToolFamily.TKN:
                return self._tools.tkn
            case ToolFamily.KUBECTL:
                return self._tools.kubectl

    def _argv(self, command: CliCommand) -> list[str]:
        return command.argv(self.tool_location(command.tool))

    async def execute(self, command: CliCommand, cwd: str | None = None) -> ExitData:
        """Run a command and capture stdout and stderr separately."""
        start_time = time.perf_counter()
        argv = self._argv(command)
        log.debug("Executing: %s", command)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd or self._default_cwd,
                env=os.environ.copy(),
            )
        except FileNotFoundError:
            return ExitData(succeeded=False, error=f"Command not found: {argv[0]}", exit_code=127)
        except PermissionError:
            return ExitData(succeeded=False, error=f"Permission denied: {argv[0]}", exit_code=126)
        except OSError as e:
            return ExitData(succeeded=False, error=f"OS error: {e}", exit_code=1)

        try:
            if self._timeout is not None:
                stdout_data, stderr_data = await asyncio.wait_for(
                    process.communicate(), timeout=self._timeout
                )
            else:
                stdout_data, stderr_data = await process.communicate()
        except asyncio.TimeoutError:
            await _kill(process)
            log.warning("Command timed out after %ss: %s", self._timeout, command)
            return ExitData(
                succeeded=False,
                error=f"Command timed out after {self._timeout}s: {command}",
                exit_code=None,
            )
        except asyncio.CancelledError:
            await _kill(process)
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        stdout = stdout_data.decode("utf-8", errors="replace")
        stderr = stderr_data.decode("utf-8", errors="replace")
        exit_code = process.returncode

        log.debug("Finished in %.0fms (exit=%s): %s", duration_ms, exit_code, command)

        if exit_code == 0:
            # kubectl prints warnings on stderr even when it succeeds
            return ExitData(succeeded=True, stdout=stdout, error=stderr or None, exit_code=0)
        return ExitData(
            succeeded=False,
            stdout=stdout,
            error=stderr.strip() or f"Command failed with exit code {exit_code}: {command}",
            exit_code=exit_code,
        )

    def watch(
        self,
        command: CliCommand,
        on_output: OutputCallback,
        on_exit: ExitCallback | None = None,
    ) -> WatchHandle:
        """Start a watch process; returns immediately with its handle."""
        task = asyncio.create_task(self._pump(command, on_output, on_exit))
        return WatchHandle(str(command), task)

    async def _pump(
        self,
        command: CliCommand,
        on_output: OutputCallback,
        on_exit: ExitCallback | None,
    ) -> int | None:
        argv = self._argv(command)
        log.debug("Starting watch: %s", command)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                cwd=self._default_cwd,
            )
        except OSError as e:
            log.warning("Watch could not start (%s): %s", e, command)
            _notify_exit(on_exit, None)
            return None

        assert process.stdout is not None
        try:
            async for raw in process.stdout:
                line = raw.decode("utf-8", errors="replace").rstrip()
                if not line:
                    continue
                try:
                    on_output(line)
                except Exception as e:
                    log.error("Error in watch callback: %s", e)
            exit_code = await process.wait()
        except asyncio.CancelledError:
            await _kill(process)
            raise

        log.debug("Watch ended (exit=%s): %s", exit_code, command)
        _notify_exit(on_exit, exit_code)
        return exit_code

    async def execute_in_terminal(self, command: CliCommand, cwd: str | None = None) -> int:
        """Run a command with inherited stdio so its output streams to the terminal."""
        argv = self._argv(command)
        log.info("Running in terminal: %s", command)
        try:
            process = await asyncio.create_subprocess_exec(*argv, cwd=cwd or self._default_cwd)
        except FileNotFoundError:
            log.error("Command not found: %s", argv[0])
            return 127
        try:
            return await process.wait()
        except asyncio.CancelledError:
            await _kill(process)
            raise


def _notify_exit(on_exit: ExitCallback | None, exit_code: int | None) -> None:
    if on_exit is None:
        return
    try:
        on_exit(exit_code)
    except Exception as e:
        log.error("Error in watch exit callback: %s", e)


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
        await process.wait()
    except ProcessLookupError:
        pass  # Process already gone

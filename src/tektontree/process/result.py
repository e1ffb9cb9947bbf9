"""Exit data returned by every captured command execution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ExitData:
    """Result of running a CliCommand.

    Attributes:
        succeeded: True if the process exited with code 0.
        stdout: Captured standard output (decoded, may be empty).
        error: Standard error text or a description of why the process
            could not run. None when the command succeeded cleanly.
        exit_code: Process exit code, or None if it never ran or was killed.
    """

    succeeded: bool
    stdout: str = ""
    error: str | None = None
    exit_code: int | None = None

    @property
    def error_text(self) -> str:
        """The diagnostic text, empty when there is none."""
        return self.error or ""

    def __repr__(self) -> str:
        if self.succeeded:
            return f"<ExitData ok, {len(self.stdout)} chars>"
        return f"<ExitData failed, exit={self.exit_code}>"

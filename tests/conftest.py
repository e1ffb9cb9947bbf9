"""Root pytest configuration for all tests."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from tektontree.config import Config
from tektontree.process.command import CliCommand, Commands
from tektontree.process.result import ExitData
from tektontree.process.watch import WatchHandle
from tektontree.tree.provider import TreeContext, TreeProvider

# Configure pytest-asyncio to use auto mode
# This is redundant with pyproject.toml but ensures it's set
pytest_plugins = ("pytest_asyncio",)


def listing(*items: dict[str, Any]) -> str:
    """JSON for `kubectl get ... -o json` with the given items."""
    return json.dumps({"apiVersion": "v1", "kind": "List", "items": list(items)})


def item(
    name: str,
    created: str | None = None,
    status: str | None = None,
    completed: str | None = None,
    labels: dict[str, str] | None = None,
    spec: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """A resource item as kubectl prints it."""
    metadata: dict[str, Any] = {"name": name}
    if created:
        metadata["creationTimestamp"] = created
    if labels:
        metadata["labels"] = labels
    data: dict[str, Any] = {"metadata": metadata}
    if status or completed:
        data["status"] = {}
        if status:
            data["status"]["conditions"] = [{"status": status, "type": "Succeeded"}]
        if completed:
            data["status"]["completionTime"] = completed
    if spec is not None:
        data["spec"] = spec
    return data


@dataclass
class FakeWatch:
    """A watch started through FakeExecutor; tests drive its callbacks."""

    command: CliCommand
    on_output: Any
    on_exit: Any
    handle: WatchHandle = field(init=False)

    @property
    def cancelled(self) -> bool:
        return self.handle.done

    def emit(self, line: str = "{}") -> None:
        self.on_output(line)

    def exit(self, code: int | None = 0) -> None:
        if self.on_exit is not None:
            self.on_exit(code)


class FakeExecutor:
    """CommandExecutor that answers from a table keyed by command string.

    Unknown commands succeed with an empty listing.
    """

    def __init__(self, responses: dict[str, ExitData] | None = None) -> None:
        self.responses: dict[str, ExitData] = dict(responses or {})
        self.calls: list[str] = []
        self.watches: list[FakeWatch] = []
        self.terminal_calls: list[str] = []

    def respond(self, command: CliCommand | str, result: ExitData) -> None:
        self.responses[str(command)] = result

    def respond_items(self, command: CliCommand | str, *items: dict[str, Any]) -> None:
        self.respond(command, ExitData(succeeded=True, stdout=listing(*items), exit_code=0))

    def fail(self, command: CliCommand | str, error: str, stdout: str = "") -> None:
        self.respond(command, ExitData(succeeded=False, stdout=stdout, error=error, exit_code=1))

    async def execute(self, command: CliCommand, cwd: str | None = None) -> ExitData:
        self.calls.append(str(command))
        return self.responses.get(
            str(command), ExitData(succeeded=True, stdout=listing(), exit_code=0)
        )

    def watch(self, command, on_output, on_exit=None) -> WatchHandle:
        fake = FakeWatch(command, on_output, on_exit)
        fake.handle = WatchHandle(str(command), asyncio.get_running_loop().create_future())
        self.watches.append(fake)
        return fake.handle

    async def execute_in_terminal(self, command: CliCommand, cwd: str | None = None) -> int:
        self.terminal_calls.append(str(command))
        return 0

    def called(self, command: CliCommand | str) -> bool:
        return str(command) in self.calls

    def active_watches(self) -> list[FakeWatch]:
        return [w for w in self.watches if not w.cancelled]


@pytest.fixture
def commands() -> Commands:
    return Commands()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def provider(config: Config, executor: FakeExecutor):
    tree = TreeProvider(TreeContext.from_config(config, executor=executor))
    yield tree
    tree.dispose()

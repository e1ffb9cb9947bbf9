"""Resource fetching: run a listing command and turn its JSON into nodes.

Every category goes through the same pipeline:
execute -> classify failure -> parse -> dedup by name -> build nodes -> sort.
A failed command yields one UNAVAILABLE placeholder carrying the
diagnostic; malformed output yields no nodes. Nothing raises past fetch().
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import ValidationError

from tektontree.logging import get_logger
from tektontree.process.command import CliCommand, Commands
from tektontree.process.protocol import CommandExecutor
from tektontree.tree.category import Category, RunState
from tektontree.tree.models import (
    ResourceItem,
    StartTrigger,
    parse_items,
    start_trigger_from_item,
)
from tektontree.tree.nodes import RunNode, TreeNode, placeholder

log = get_logger("fetcher")

PIPELINE_TASK_LABEL = "tekton.dev/pipelineTask"


class ResourceFetcher:
    """Lists cluster resources of one category as child nodes of a parent."""

    def __init__(self, executor: CommandExecutor, commands: Commands) -> None:
        self._executor = executor
        self._commands = commands

    def command_for(self, category: Category, parent: TreeNode) -> CliCommand:
        """The listing command for ``category`` children of ``parent``."""
        c = self._commands
        match category:
            case Category.PIPELINE:
                return c.list_pipelines()
            case Category.PIPELINE_RUN:
                if parent.category is Category.PIPELINE:
                    return c.list_pipeline_runs_for_pipeline(parent.name)
                return c.list_pipeline_runs()
            case Category.TASK:
                return c.list_tasks()
            case Category.CLUSTER_TASK:
                return c.list_cluster_tasks()
            case Category.TASK_RUN:
                if parent.category in (Category.TASK, Category.CLUSTER_TASK):
                    return c.list_task_runs_for_task(parent.name)
                if parent.category is Category.PIPELINE_RUN:
                    return c.list_task_runs_for_pipeline_run(parent.name)
                return c.list_task_runs()
            case Category.PIPELINE_RESOURCE:
                return c.list_pipeline_resources()
            case Category.TRIGGER_TEMPLATE:
                return c.list_trigger_templates()
            case Category.TRIGGER_BINDING:
                return c.list_trigger_bindings()
            case Category.CLUSTER_TRIGGER_BINDING:
                return c.list_cluster_trigger_bindings()
            case Category.EVENT_LISTENER:
                return c.list_event_listeners()
            case Category.CONDITION:
                return c.list_conditions()
            case _:
                raise ValueError(f"No listing command for category {category}")

    async def fetch(self, category: Category, parent: TreeNode) -> list[TreeNode]:
        """Fetch, dedup and sort the ``category`` children of ``parent``."""
        command = self.command_for(category, parent)
        result = await self._executor.execute(command)

        if not result.succeeded:
            log.warning("Listing %s for %s failed: %s", category, parent.name, result.error_text)
            return [placeholder(parent, result.error_text or f"Failed to list {category}")]

        items = _unique_by_name(parse_items(result.stdout))
        nodes = [self._make_node(category, parent, item) for item in items]
        return sort_nodes(category, nodes)

    def _make_node(self, category: Category, parent: TreeNode, item: ResourceItem) -> TreeNode:
        if not category.is_run:
            return TreeNode(name=item.name, category=category, parent=parent, provider=parent.provider)

        status = item.status
        short_name = None
        if category is Category.TASK_RUN:
            short_name = item.metadata.labels.get(PIPELINE_TASK_LABEL)
        return RunNode(
            name=item.name,
            category=category,
            parent=parent,
            provider=parent.provider,
            creation_timestamp=_utc(item.metadata.creation_timestamp),
            state=RunState.parse(status.condition_status) if status else None,
            finished=_utc(status.completion_time) if status else None,
            short_name=short_name,
        )

    # ---- Raw data for the start workflow ----

    async def _raw_items(self, command: CliCommand) -> list[ResourceItem]:
        result = await self._executor.execute(command)
        if not result.succeeded:
            log.warning("Std.err when listing %s: %s", command, result.error_text)
            return []
        return parse_items(result.stdout)

    async def get_raw_tasks(self) -> list[ResourceItem]:
        return await self._raw_items(self._commands.list_tasks())

    async def get_raw_cluster_tasks(self) -> list[ResourceItem]:
        return await self._raw_items(self._commands.list_cluster_tasks())

    async def get_start_trigger(self, category: Category, name: str) -> StartTrigger | None:
        """Look up the start data (resources, params) of a task or pipeline.

        Task resources are flattened from their inputs/outputs mapping, each
        entry tagged with the key it came from.
        """
        match category:
            case Category.TASK:
                items = await self.get_raw_tasks()
            case Category.CLUSTER_TASK:
                items = await self.get_raw_cluster_tasks()
            case Category.PIPELINE:
                items = await self._raw_items(self._commands.list_pipelines())
            case _:
                raise ValueError(f"{category} cannot be started")

        for item in items:
            if item.name != name:
                continue
            try:
                return start_trigger_from_item(item)
            except ValidationError as e:
                log.warning("Malformed spec for %s %s: %s", category, name, e)
                return None
        return None


def _unique_by_name(items: list[ResourceItem]) -> list[ResourceItem]:
    """Drop repeated names, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[ResourceItem] = []
    for item in items:
        if item.name in seen:
            continue
        seen.add(item.name)
        unique.append(item)
    return unique


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def sort_nodes(category: Category, nodes: list[TreeNode]) -> list[TreeNode]:
    """Runs newest first (stable on ties, undated last); others by (category, name)."""
    if category.is_run:
        return sorted(
            nodes,
            key=lambda n: (n.creation_timestamp is not None, n.creation_timestamp or _OLDEST),
            reverse=True,
        )
    return sorted(nodes, key=lambda n: (n.category.value, n.name))


def _utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

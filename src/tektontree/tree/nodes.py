"""Tree node types.

This module defines:
- TreeNode: a cluster resource or list node; children resolved lazily
- RunNode: a pipeline-run or task-run with timing and a transient state
- MoreNode: the "load more" sentinel appended by pagination
- placeholder(): an UNAVAILABLE node carrying a diagnostic message

Children are never stored on a node. Each call to get_children() asks the
provider, which re-runs the listing command, so every expansion reflects the
latest cluster output and a refresh always yields new node instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from tektontree.tree.category import Category, RunState

if TYPE_CHECKING:
    from tektontree.tree.provider import TreeProvider

NodeKey = tuple[Any, ...]


@dataclass(eq=False)
class TreeNode:
    """A node in the resource tree.

    Attributes:
        name: Resource name, unique only among same-category siblings
        category: What this node stands for
        parent: The node whose expansion produced this one (None for root)
        creation_timestamp: Source-reported creation time, runs only
        state: Run condition status, runs only
        visible_children: Pagination cursor, set on first paginated expansion
    """

    name: str
    category: Category
    parent: TreeNode | None = field(default=None, repr=False)
    creation_timestamp: datetime | None = None
    state: RunState | None = None
    visible_children: int | None = None
    provider: TreeProvider | None = field(default=None, repr=False)

    @property
    def key(self) -> NodeKey:
        """Stable identity across refreshes: (parent key, category, name)."""
        parent_key = self.parent.key if self.parent is not None else ()
        return (parent_key, self.category.value, self.name)

    @property
    def label(self) -> str:
        return self.name

    @property
    def description(self) -> str:
        return ""

    @property
    def tooltip(self) -> str:
        prefix = self.category.tooltip_prefix
        if self.category is Category.UNAVAILABLE or not prefix:
            return prefix or self.label
        return f"{prefix}: {self.label}"

    @property
    def has_children(self) -> bool:
        """False for nodes that can never be expanded."""
        match self.category:
            case (
                Category.PIPELINE_RESOURCE
                | Category.TRIGGER_TEMPLATE
                | Category.TRIGGER_BINDING
                | Category.CLUSTER_TRIGGER_BINDING
                | Category.EVENT_LISTENER
                | Category.CONDITION
                | Category.TASK_RUN
                | Category.UNAVAILABLE
                | Category.MORE
            ):
                return False
            case _:
                return True

    def get_name(self) -> str:
        return self.name

    def get_parent(self) -> TreeNode | None:
        return self.parent

    async def get_children(self) -> list[TreeNode]:
        """Re-fetch this node's children."""
        if self.provider is None or not self.has_children:
            return []
        return await self.provider.get_children(self)


@dataclass(eq=False)
class RunNode(TreeNode):
    """A pipeline-run or task-run.

    ``started`` mirrors ``creation_timestamp``; ``finished`` is the
    ``status.completionTime`` when the run has completed.
    """

    finished: datetime | None = None
    short_name: str | None = None  # tekton.dev/pipelineTask label of a task-run

    @property
    def started(self) -> datetime | None:
        return self.creation_timestamp

    @property
    def is_transient(self) -> bool:
        return self.state is RunState.UNKNOWN

    @property
    def label(self) -> str:
        return self.short_name or self.name

    @property
    def description(self) -> str:
        return self.describe()

    def describe(self, now: datetime | None = None) -> str:
        """Elapsed-time summary, e.g. "started 5m ago, finished in 1m 20s"."""
        if self.started is None:
            return ""
        now = now or datetime.now(timezone.utc)
        ago = f"started {humanize_duration(now - self.started)} ago"

        if self.finished is not None:
            took = f"finished in {humanize_duration(self.finished - self.started)}"
            if self.category is Category.TASK_RUN and not self._listed_under_task():
                return took
            return f"{ago}, {took}"

        running = f"running for {humanize_duration(now - self.started)}"
        if self.category is Category.TASK_RUN and self._listed_under_task():
            return f"{ago}, {running}"
        return running

    def _listed_under_task(self) -> bool:
        return self.parent is not None and self.parent.category is Category.TASK


@dataclass(eq=False)
class MoreNode(TreeNode):
    """Sentinel that reveals ``show_next`` more of ``total_count`` children."""

    name: str = "more"
    category: Category = Category.MORE
    show_next: int = 0
    total_count: int = 0

    @property
    def description(self) -> str:
        return f"{self.show_next} from {self.total_count}"

    @property
    def tooltip(self) -> str:
        return f"{self.show_next} more from {self.total_count}"


def placeholder(parent: TreeNode | None, message: str) -> TreeNode:
    """An UNAVAILABLE node standing in for a failed fetch."""
    return TreeNode(name=message, category=Category.UNAVAILABLE, parent=parent)


_UNITS: tuple[tuple[str, int], ...] = (
    ("y", 31_557_600_000),
    ("mo", 2_629_800_000),
    ("w", 604_800_000),
    ("d", 86_400_000),
    ("h", 3_600_000),
    ("m", 60_000),
    ("s", 1_000),
    ("ms", 1),
)


def humanize_duration(delta: Any) -> str:
    """Short two-unit duration, e.g. ``"1h 5m"``, ``"42s"``, ``"0ms"``.

    Accepts a timedelta or a number of seconds. Negative spans (clock skew)
    render as zero. The second unit is rounded.
    """
    seconds = delta.total_seconds() if hasattr(delta, "total_seconds") else float(delta)
    total_ms = max(0, round(seconds * 1000))

    for index, (unit, size) in enumerate(_UNITS):
        if total_ms < size and unit != "ms":
            continue
        count, remainder = divmod(total_ms, size)
        if index + 1 == len(_UNITS):
            return f"{count}{unit}"
        next_unit, next_size = _UNITS[index + 1]
        next_count = round(remainder / next_size)
        if next_count * next_size >= size:
            count, next_count = count + 1, 0
        if next_count:
            return f"{count}{unit} {next_count}{next_unit}"
        return f"{count}{unit}"
    return "0ms"

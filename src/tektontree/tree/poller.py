"""Watch-driven refresh of runs that are still executing.

For every freshly fetched run whose state is UNKNOWN the poller keeps one
``kubectl get <kind> <name> -w`` process alive. Each JSON document it prints means
the run changed, so the affected part of the tree is asked to refresh once.

Watches are keyed by node key, not node instance: a refresh that still
shows the run as transient hands the existing watch to the new instance,
and a refresh that no longer shows it (or shows it finished) cancels it.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass

from tektontree.logging import get_logger
from tektontree.process.command import Commands
from tektontree.process.protocol import CommandExecutor
from tektontree.process.watch import WatchHandle
from tektontree.tree.category import Category, RunState
from tektontree.tree.nodes import NodeKey, TreeNode

log = get_logger("poller")

RefreshCallback = Callable[["TreeNode | None"], None]
CategoryLookup = Callable[[Category], "TreeNode | None"]

# Top-level lists whose contents move while a pipeline-run progresses.
DEPENDENT_LISTS: dict[Category, tuple[Category, ...]] = {
    Category.PIPELINE_RUN: (
        Category.TASK_RUN_LIST,
        Category.CLUSTER_TASK_LIST,
        Category.TASK_LIST,
    ),
}


_DECODER = json.JSONDecoder()
_MAX_PENDING = 1_000_000


@dataclass
class _Watch:
    node: TreeNode
    parent_key: NodeKey
    handle: WatchHandle | None = None
    pending: str = ""  # lines of a JSON document not yet complete


class StatusPoller:
    """Attaches watches to transient runs and turns their output into refreshes."""

    def __init__(
        self,
        executor: CommandExecutor,
        commands: Commands,
        refresh: RefreshCallback,
        find_category_node: CategoryLookup,
    ) -> None:
        self._executor = executor
        self._commands = commands
        self._refresh = refresh
        self._find_category_node = find_category_node
        self._watches: dict[NodeKey, _Watch] = {}

    @property
    def active_count(self) -> int:
        return len(self._watches)

    def is_watching(self, node: TreeNode) -> bool:
        return node.key in self._watches

    def track(self, parent: TreeNode, nodes: list[TreeNode]) -> None:
        """Reconcile watches for the latest children of ``parent``."""
        transient = {
            node.key: node
            for node in nodes
            if node.state is RunState.UNKNOWN and node.category.watch_kind is not None
        }

        parent_key = parent.key
        for key, watch in list(self._watches.items()):
            if watch.parent_key == parent_key and key not in transient:
                self._drop(key, watch, reason="superseded")

        for key, node in transient.items():
            existing = self._watches.get(key)
            if existing is not None:
                existing.node = node
                continue
            self._start(key, node, parent_key)

    def _start(self, key: NodeKey, node: TreeNode, parent_key: NodeKey) -> None:
        kind = node.category.watch_kind
        assert kind is not None
        watch = _Watch(node=node, parent_key=parent_key)
        self._watches[key] = watch
        watch.handle = self._executor.watch(
            self._commands.watch_resource(kind, node.name),
            on_output=lambda line: self._on_output(watch, line),
            on_exit=lambda code: self._on_exit(key, watch, code),
        )
        log.debug("Watching %s %s", kind, node.name)

    def _drop(self, key: NodeKey, watch: _Watch, reason: str) -> None:
        if self._watches.get(key) is watch:
            del self._watches[key]
        if watch.handle is not None:
            watch.handle.cancel()
        log.debug("Stopped watching %s (%s)", watch.node.name, reason)

    def _on_output(self, watch: _Watch, line: str) -> None:
        """Collect watch output and report one change per complete JSON document.

        ``kubectl get -w -o json`` pretty-prints every event over many lines.
        Output that is not JSON counts as one change per line.
        """
        if not watch.pending and not line.lstrip().startswith(("{", "[")):
            self._on_change(watch)
            return

        watch.pending += line + "\n"
        if len(watch.pending) > _MAX_PENDING:
            log.warning("Discarding unparseable watch output for %s", watch.node.name)
            watch.pending = ""
            self._on_change(watch)
            return
        if not line.rstrip().endswith(("}", "]")):
            return

        documents = 0
        text = watch.pending.lstrip()
        while text:
            try:
                _, end = _DECODER.raw_decode(text)
            except json.JSONDecodeError:
                break
            documents += 1
            text = text[end:].lstrip()
        watch.pending = text
        if documents:
            self._on_change(watch)

    def _on_change(self, watch: _Watch) -> None:
        node = watch.node
        match node.category:
            case Category.PIPELINE_RUN:
                self._refresh(node)
                for category in DEPENDENT_LISTS[Category.PIPELINE_RUN]:
                    dependent = self._find_category_node(category)
                    if dependent is not None:
                        self._refresh(dependent)
            case Category.TASK_RUN:
                self._refresh(node.parent)
            case _:
                self._refresh(node)

    def _on_exit(self, key: NodeKey, watch: _Watch, exit_code: int | None) -> None:
        if self._watches.get(key) is watch:
            del self._watches[key]
        node = watch.node
        if exit_code != 0:
            # Failed watches go quiet until something else refreshes the node
            log.info("Watch on %s ended with exit code %s", node.name, exit_code)
            return
        if node.category is Category.TASK_RUN:
            self._refresh(node.parent)
        else:
            self._refresh(None)

    def cancel_all(self) -> None:
        """Cancel every watch, e.g. when the provider is disposed."""
        for key, watch in list(self._watches.items()):
            self._drop(key, watch, reason="disposed")

"""The tree provider: the API a rendering layer talks to.

A TreeContext carries everything a tree needs (configuration, executor,
command builders) so that several independent trees can coexist; the
provider owns the root node and the category list built from it.

No exception crosses get_children(): cluster and command failures come
back as UNAVAILABLE placeholder nodes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from tektontree.config.schema import Config
from tektontree.logging import get_logger
from tektontree.process.command import Commands
from tektontree.process.executor import SubprocessCommandExecutor
from tektontree.process.protocol import CommandExecutor
from tektontree.tree.category import Category
from tektontree.tree.fetcher import ResourceFetcher
from tektontree.tree.nodes import MoreNode, TreeNode, placeholder
from tektontree.tree.pagination import Paginator
from tektontree.tree.poller import StatusPoller
from tektontree.tree.root import HealthCheck, RootAssembler

log = get_logger("provider")

RefreshListener = Callable[["TreeNode | None"], None]


@dataclass
class TreeContext:
    """Application context for one tree."""

    config: Config
    executor: CommandExecutor
    commands: Commands

    @classmethod
    def from_config(
        cls, config: Config, executor: CommandExecutor | None = None
    ) -> TreeContext:
        if executor is None:
            executor = SubprocessCommandExecutor(
                tools=config.tools, timeout=config.tree.command_timeout
            )
        return cls(
            config=config,
            executor=executor,
            commands=Commands(verbosity=config.tree.output_verbosity),
        )


class TreeProvider:
    """Lazily resolves the resource tree and signals when parts of it go stale.

    Example:
        provider = TreeProvider(TreeContext.from_config(load_config()))
        provider.on_refresh(lambda node: print("stale:", node))
        for category_node in await provider.get_children():
            children = await category_node.get_children()
    """

    def __init__(self, context: TreeContext) -> None:
        self.context = context
        self.root = TreeNode(name="root", category=Category.ROOT, provider=self)
        self.fetcher = ResourceFetcher(context.executor, context.commands)
        self.paginator = Paginator(context.config.tree.page_size)
        self.poller = StatusPoller(
            context.executor, context.commands, self.refresh, self.find_category_node
        )
        self._health = HealthCheck(context.executor, context.commands)
        self._assembler = RootAssembler(self.root)
        self._listeners: list[RefreshListener] = []

    # ---- Tree access ----

    async def get_children(self, node: TreeNode | None = None) -> list[TreeNode]:
        """Re-fetch the children of ``node`` (the root when None)."""
        target = node if node is not None else self.root
        try:
            return await self._children_of(target)
        except Exception as e:
            log.exception("Unexpected error expanding %s", target.name)
            return [placeholder(target, f"Failed to load {target.name}: {e}")]

    async def _children_of(self, node: TreeNode) -> list[TreeNode]:
        fetch = self.fetcher.fetch
        match node.category:
            case Category.ROOT:
                return await self._root_children()
            case Category.PIPELINE_LIST:
                return await fetch(Category.PIPELINE, node)
            case Category.PIPELINE_RUN_LIST | Category.PIPELINE:
                return await self._runs(Category.PIPELINE_RUN, node)
            case Category.TASK_LIST:
                return await fetch(Category.TASK, node)
            case Category.CLUSTER_TASK_LIST:
                return await fetch(Category.CLUSTER_TASK, node)
            case (
                Category.TASK_RUN_LIST
                | Category.TASK
                | Category.CLUSTER_TASK
                | Category.PIPELINE_RUN
            ):
                return await self._runs(Category.TASK_RUN, node)
            case Category.PIPELINE_RESOURCE_LIST:
                return await fetch(Category.PIPELINE_RESOURCE, node)
            case Category.TRIGGER_TEMPLATE_LIST:
                return await fetch(Category.TRIGGER_TEMPLATE, node)
            case Category.TRIGGER_BINDING_LIST:
                return await fetch(Category.TRIGGER_BINDING, node)
            case Category.CLUSTER_TRIGGER_BINDING_LIST:
                return await fetch(Category.CLUSTER_TRIGGER_BINDING, node)
            case Category.EVENT_LISTENER_LIST:
                return await fetch(Category.EVENT_LISTENER, node)
            case Category.CONDITION_LIST:
                return await fetch(Category.CONDITION, node)
            case (
                Category.TASK_RUN
                | Category.PIPELINE_RESOURCE
                | Category.TRIGGER_TEMPLATE
                | Category.TRIGGER_BINDING
                | Category.CLUSTER_TRIGGER_BINDING
                | Category.EVENT_LISTENER
                | Category.CONDITION
                | Category.UNAVAILABLE
                | Category.MORE
            ):
                return []

    async def _root_children(self) -> list[TreeNode]:
        status = await self._health.run()
        if not status.ok:
            self.poller.cancel_all()
            return [placeholder(self.root, status.message or "Cluster unavailable")]
        return self._assembler.build()

    async def _runs(self, category: Category, node: TreeNode) -> list[TreeNode]:
        runs = await self.fetcher.fetch(category, node)
        self.poller.track(node, runs)
        return self.paginator.limit_view(node, runs)

    def get_parent(self, node: TreeNode) -> TreeNode | None:
        return node.parent

    def get_name(self, node: TreeNode) -> str:
        return node.name

    def find_category_node(self, category: Category) -> TreeNode | None:
        """The top-level node of ``category``, if the root has been built."""
        if not self._assembler.built:
            return None
        for node in self._assembler.build():
            if node.category is category:
                return node
        return None

    # ---- Pagination ----

    def show_more(self, more: MoreNode) -> TreeNode:
        """Reveal the next page under ``more``'s parent and refresh that parent only."""
        parent = self.paginator.show_more(more)
        self.refresh(parent)
        return parent

    # ---- Refresh signal ----

    def on_refresh(self, listener: RefreshListener) -> Callable[[], None]:
        """Subscribe to refresh requests. Returns an unsubscribe function.

        The listener receives the stale node, or None for the whole tree.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh(self, node: TreeNode | None = None) -> None:
        """Ask listeners to re-query ``node``'s subtree (everything when None)."""
        log.debug("Refresh requested for %s", node.name if node is not None else "<tree>")
        for listener in list(self._listeners):
            try:
                listener(node)
            except Exception as e:
                log.error("Refresh listener error: %s", e)

    def dispose(self) -> None:
        """Stop all watches and drop listeners."""
        self.poller.cancel_all()
        self._listeners.clear()

"""Pagination of long child lists behind a "more" node."""

from __future__ import annotations

from tektontree.logging import get_logger
from tektontree.tree.nodes import MoreNode, TreeNode

log = get_logger("pagination")


class Paginator:
    """Clips child lists to a node's pagination cursor.

    The cursor (``visible_children``) lives on the node instance whose
    children are being listed and only ever grows.
    """

    def __init__(self, page_size: int = 5) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size

    def limit_view(self, context: TreeNode, children: list[TreeNode]) -> list[TreeNode]:
        """Return the visible slice of ``children``, plus a MoreNode if clipped."""
        if not context.visible_children:
            context.visible_children = self.page_size

        visible = context.visible_children
        page = children[: min(visible, len(children))]

        if visible < len(children):
            show_next = min(self.page_size, len(children) - visible)
            page.append(
                MoreNode(parent=context, show_next=show_next, total_count=len(children))
            )
        return page

    def show_more(self, more: MoreNode) -> TreeNode:
        """Advance the parent's cursor by ``more.show_next``; returns the parent."""
        parent = more.parent
        if parent is None:
            raise ValueError("MoreNode has no parent")
        parent.visible_children = (parent.visible_children or self.page_size) + more.show_next
        log.debug(
            "Showing %d of %d children of %s",
            min(parent.visible_children, more.total_count),
            more.total_count,
            parent.name,
        )
        return parent

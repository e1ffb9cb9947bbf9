"""Render a TreeProvider's tree with rich."""

from __future__ import annotations

import asyncio

from rich.markup import escape
from rich.tree import Tree

from tektontree.tree.category import Category, RunState
from tektontree.tree.nodes import TreeNode
from tektontree.tree.provider import TreeProvider

_STATE_MARKERS = {
    RunState.TRUE: "[green]✔[/green]",
    RunState.FALSE: "[red]✘[/red]",
    RunState.UNKNOWN: "[yellow]⟳[/yellow]",
}


def node_label(node: TreeNode) -> str:
    """Rich markup for one node."""
    match node.category:
        case Category.UNAVAILABLE:
            return f"[red]{escape(node.label)}[/red]"
        case Category.MORE:
            return f"[dim]more ({escape(node.description)})[/dim]"
        case _ if node.category.is_list:
            return f"[bold]{escape(node.label)}[/bold]"

    text = escape(node.label)
    if node.state is not None:
        text = f"{_STATE_MARKERS[node.state]} {text}"
    if node.description:
        text = f"{text} [dim]{escape(node.description)}[/dim]"
    return text


async def render_tree(provider: TreeProvider, depth: int = 2, title: str = "Tekton Pipelines") -> Tree:
    """Expand the tree ``depth`` levels below the category nodes and build a rich Tree."""
    tree = Tree(f"[bold blue]{escape(title)}[/bold blue]")
    await _add_children(provider, None, tree, depth + 1)
    return tree


async def _add_children(
    provider: TreeProvider, node: TreeNode | None, branch: Tree, depth: int
) -> None:
    children = await provider.get_children(node)
    expansions = []
    for child in children:
        sub = branch.add(node_label(child))
        if depth > 1 and child.has_children:
            expansions.append(_add_children(provider, child, sub, depth - 1))
    # Sibling subtrees are fetched concurrently; rich keeps insertion order.
    await asyncio.gather(*expansions)

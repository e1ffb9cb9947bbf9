"""tektontree: a lazily-populated, auto-refreshing tree of Tekton resources.

Every datum comes from running ``tkn`` or ``kubectl`` and parsing its JSON
output; nothing is cached between expansions.

Example:
    import asyncio
    from tektontree import TreeContext, TreeProvider, load_config

    async def main():
        provider = TreeProvider(TreeContext.from_config(load_config()))
        for category in await provider.get_children():
            print(category.name, [n.name for n in await category.get_children()])
        provider.dispose()

    asyncio.run(main())
"""

__version__ = "0.1.0"

from tektontree.config import Config, load_config
from tektontree.tree import (
    Category,
    MoreNode,
    RunNode,
    RunState,
    TreeContext,
    TreeNode,
    TreeProvider,
)

__all__ = [
    "Category",
    "Config",
    "MoreNode",
    "RunNode",
    "RunState",
    "TreeContext",
    "TreeNode",
    "TreeProvider",
    "__version__",
    "load_config",
]

"""The resource-tree synchronization engine.

- Category / RunState: the closed set of node kinds and run states
- TreeNode / RunNode / MoreNode: lazily expanded nodes
- ResourceFetcher: listing command -> deduplicated, sorted nodes
- Paginator: page-size clipping with a "more" continuation
- StatusPoller: watches on running runs that trigger refreshes
- HealthCheck / RootAssembler: cluster check and top-level category nodes
- TreeProvider / TreeContext: the rendering-layer API
"""

from tektontree.tree.category import ROOT_CATEGORIES, Category, RunState
from tektontree.tree.fetcher import ResourceFetcher
from tektontree.tree.nodes import MoreNode, RunNode, TreeNode, humanize_duration, placeholder
from tektontree.tree.pagination import Paginator
from tektontree.tree.poller import StatusPoller
from tektontree.tree.provider import TreeContext, TreeProvider
from tektontree.tree.root import FailureKind, HealthCheck, HealthStatus, RootAssembler

__all__ = [
    "Category",
    "FailureKind",
    "HealthCheck",
    "HealthStatus",
    "MoreNode",
    "Paginator",
    "ROOT_CATEGORIES",
    "ResourceFetcher",
    "RootAssembler",
    "RunNode",
    "RunState",
    "StatusPoller",
    "TreeContext",
    "TreeNode",
    "TreeProvider",
    "humanize_duration",
    "placeholder",
]

"""Cluster health check and the fixed list of top-level category nodes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from tektontree.logging import get_logger
from tektontree.process.command import Commands
from tektontree.process.protocol import CommandExecutor
from tektontree.process.result import ExitData
from tektontree.tree.category import ROOT_CATEGORIES
from tektontree.tree.nodes import TreeNode

log = get_logger("root")


class FailureKind(Enum):
    """Cluster-level failures that replace the whole tree.

    Narrower failures stay local: a failed listing becomes a placeholder
    child, malformed output an empty listing, and a failed watch only logs.
    """

    CONNECTIVITY = "connectivity"
    AUTHORIZATION = "authorization"
    RESOURCE_TYPE_MISSING = "resource_type_missing"


NO_PRIVILEGES_MESSAGE = "The current user doesn't have the privileges to interact with tekton resources."
LOGIN_MESSAGE = "Please login to the server."
INSTALL_MESSAGE = "Please install the OpenShift Pipelines Operator."
CONNECT_MESSAGE = "Unable to connect to OpenShift cluster, is it down?"

_UNABLE_TO_CONNECT = re.compile(r"unable to connect to the server", re.IGNORECASE)


@dataclass(frozen=True)
class HealthStatus:
    """Outcome of the health check; ``failure`` is None when the cluster is usable."""

    failure: FailureKind | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


HEALTHY = HealthStatus()


def classify(result: ExitData) -> HealthStatus:
    """Match a health-check result against the fatal failure patterns, in order."""
    if result.stdout.strip() == "no":
        return HealthStatus(FailureKind.AUTHORIZATION, NO_PRIVILEGES_MESSAGE)

    error = result.error_text
    if not error or result.succeeded:
        return HEALTHY
    if "unauthorized" in error.lower():
        return HealthStatus(FailureKind.AUTHORIZATION, LOGIN_MESSAGE)
    if "doesn't have a resource type" in error:
        return HealthStatus(FailureKind.RESOURCE_TYPE_MISSING, INSTALL_MESSAGE)
    if _UNABLE_TO_CONNECT.search(error):
        return HealthStatus(FailureKind.CONNECTIVITY, CONNECT_MESSAGE)
    return HEALTHY


class HealthCheck:
    """Verifies the cluster is reachable and the user may use Tekton resources.

    Runs ``kubectl auth can-i create pipeline.tekton.dev`` and, when that
    does not already settle it, ``kubectl get pipeline.tekton.dev``.
    """

    def __init__(self, executor: CommandExecutor, commands: Commands) -> None:
        self._executor = executor
        self._commands = commands

    async def run(self) -> HealthStatus:
        can_i = await self._executor.execute(self._commands.can_i_create_pipelines())
        status = classify(can_i)
        if not status.ok:
            log.warning("Health check failed (%s): %s", status.failure, status.message)
            return status
        if not can_i.succeeded:
            # Unrecognised errors are not fatal; category fetches report them
            log.info("Health check inconclusive: %s", can_i.error_text)
            return HEALTHY

        crd = await self._executor.execute(self._commands.get_pipeline_crd())
        status = classify(crd)
        if not status.ok:
            log.warning("Health check failed (%s): %s", status.failure, status.message)
        return status


class RootAssembler:
    """Builds the top-level category nodes once and hands out the same list after."""

    def __init__(self, root: TreeNode) -> None:
        self._root = root
        self._nodes: list[TreeNode] | None = None

    @property
    def built(self) -> bool:
        return self._nodes is not None

    def build(self) -> list[TreeNode]:
        if self._nodes is None:
            self._nodes = [
                TreeNode(name=label, category=category, parent=self._root, provider=self._root.provider)
                for label, category in ROOT_CATEGORIES
            ]
            log.debug("Assembled %d category nodes", len(self._nodes))
        return list(self._nodes)

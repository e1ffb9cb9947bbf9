"""Pydantic models for the `kubectl get ... -o json` payloads.

Only the fields the tree reads are declared; everything else is ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tektontree.logging import get_logger

log = get_logger("models")


class KubeModel(BaseModel):
    """Base model: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ObjectMeta(KubeModel):
    name: str
    creation_timestamp: datetime | None = Field(default=None, alias="creationTimestamp")
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("labels", mode="before")
    @classmethod
    def _none_labels(cls, value: Any) -> Any:
        return value or {}


class Condition(KubeModel):
    status: str | None = None


class RunStatus(KubeModel):
    conditions: list[Condition] = Field(default_factory=list)
    completion_time: datetime | None = Field(default=None, alias="completionTime")

    @property
    def condition_status(self) -> str | None:
        """``conditions[0].status`` or None."""
        if not self.conditions:
            return None
        return self.conditions[0].status


class ResourceItem(KubeModel):
    metadata: ObjectMeta
    status: RunStatus | None = None
    spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.name


class ResourceList(KubeModel):
    items: list[ResourceItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _none_items(cls, value: Any) -> Any:
        return value or []


def parse_items(stdout: str) -> list[ResourceItem]:
    """Parse a listing, returning [] when the output is not the expected shape."""
    try:
        return ResourceList.model_validate_json(stdout).items
    except ValidationError as e:
        log.debug("Treating malformed output as empty: %s", e.errors()[:1])
        return []


# ---- Start-workflow data ----


class ResourceRef(KubeModel):
    """A declared input/output resource of a task or pipeline."""

    name: str
    type: str | None = None
    resource_type: str | None = None  # "inputs" / "outputs" for tasks


class Param(KubeModel):
    name: str
    default: Any = None
    description: str | None = None


class StartTrigger(KubeModel):
    """What the start workflow needs to know about a task or pipeline."""

    name: str
    resources: list[ResourceRef] = Field(default_factory=list)
    params: list[Param] = Field(default_factory=list)
    service_account: str | None = None


def flatten_resources(resources: Any) -> list[ResourceRef]:
    """Flatten a ``resources`` spec into one list.

    Tasks declare ``{"inputs": [...], "outputs": [...]}``; each ref is tagged
    with the key it came from. Pipelines declare a flat list, which passes
    through untagged.
    """
    if isinstance(resources, list):
        return [ResourceRef.model_validate(r) for r in resources if isinstance(r, dict)]
    if not isinstance(resources, dict):
        return []
    flattened: list[ResourceRef] = []
    for kind, refs in resources.items():
        for ref in refs or []:
            if isinstance(ref, dict):
                flattened.append(ResourceRef.model_validate({**ref, "resource_type": kind}))
    return flattened


def start_trigger_from_item(item: ResourceItem) -> StartTrigger:
    spec = item.spec
    params = spec.get("params") or []
    return StartTrigger(
        name=item.name,
        resources=flatten_resources(spec.get("resources")),
        params=[Param.model_validate(p) for p in params if isinstance(p, dict)],
        service_account=spec.get("serviceAccount") or spec.get("serviceAccountName"),
    )

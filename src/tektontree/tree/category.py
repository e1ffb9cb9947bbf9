"""Node categories and run states.

Category is a closed set: every behavior that depends on it (which command
lists a node's children, whether the children are paginated, what a watch
refreshes) is selected by an exhaustive match over its members.
"""

from __future__ import annotations

from enum import Enum


class RunState(Enum):
    """Condition status reported for a run (``status.conditions[0].status``)."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | None) -> RunState | None:
        """Map a raw condition status to a RunState; None if absent/unrecognized."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Category(Enum):
    """What kind of cluster resource (or synthetic node) a TreeNode stands for."""

    # Resources
    PIPELINE = "pipeline"
    PIPELINE_RUN = "pipelinerun"
    TASK = "task"
    TASK_RUN = "taskrun"
    CLUSTER_TASK = "clustertask"
    PIPELINE_RESOURCE = "pipelineresource"
    TRIGGER_TEMPLATE = "triggertemplates"
    TRIGGER_BINDING = "triggerbinding"
    CLUSTER_TRIGGER_BINDING = "clustertriggerbinding"
    EVENT_LISTENER = "eventlistener"
    CONDITION = "conditions"

    # Top-level list nodes
    PIPELINE_LIST = "pipelinenode"
    PIPELINE_RUN_LIST = "pipelinerunnode"
    TASK_LIST = "tasknode"
    CLUSTER_TASK_LIST = "clustertasknode"
    TASK_RUN_LIST = "taskrunnode"
    PIPELINE_RESOURCE_LIST = "pipelineresourcenode"
    TRIGGER_TEMPLATE_LIST = "triggertemplatesnode"
    TRIGGER_BINDING_LIST = "triggerbindingnode"
    CLUSTER_TRIGGER_BINDING_LIST = "clustertriggerbindingnode"
    EVENT_LISTENER_LIST = "eventlistenernode"
    CONDITION_LIST = "conditionsnode"

    # Synthetic
    UNAVAILABLE = "tknDown"
    MORE = "more"
    ROOT = "root"

    def __str__(self) -> str:
        return self.value

    @property
    def is_run(self) -> bool:
        return self in (Category.PIPELINE_RUN, Category.TASK_RUN)

    @property
    def is_list(self) -> bool:
        return self.value.endswith("node")

    @property
    def watch_kind(self) -> str | None:
        """Resource kind passed to ``kubectl get <kind> <name> -w``."""
        match self:
            case Category.PIPELINE_RUN:
                return "pipelinerun"
            case Category.TASK_RUN:
                return "taskrun"
            case _:
                return None

    @property
    def tooltip_prefix(self) -> str:
        match self:
            case Category.PIPELINE_LIST:
                return "Pipelines"
            case Category.PIPELINE_RUN_LIST:
                return "PipelineRuns"
            case Category.TASK_LIST:
                return "Tasks"
            case Category.CLUSTER_TASK_LIST:
                return "ClusterTasks"
            case Category.TASK_RUN_LIST:
                return "TaskRuns"
            case Category.PIPELINE_RESOURCE_LIST | Category.PIPELINE_RESOURCE:
                return "PipelineResources"
            case Category.TRIGGER_TEMPLATE_LIST | Category.TRIGGER_TEMPLATE:
                return "TriggerTemplates"
            case Category.TRIGGER_BINDING_LIST | Category.TRIGGER_BINDING:
                return "TriggerBinding"
            case Category.CLUSTER_TRIGGER_BINDING_LIST | Category.CLUSTER_TRIGGER_BINDING:
                return "ClusterTriggerBinding"
            case Category.EVENT_LISTENER_LIST | Category.EVENT_LISTENER:
                return "EventListener"
            case Category.CONDITION_LIST | Category.CONDITION:
                return "Conditions"
            case Category.PIPELINE:
                return "Pipeline"
            case Category.PIPELINE_RUN:
                return "PipelineRun"
            case Category.TASK:
                return "Task"
            case Category.TASK_RUN:
                return "TaskRun"
            case Category.CLUSTER_TASK:
                return "Clustertask"
            case Category.UNAVAILABLE:
                return "Cannot connect to the tekton"
            case Category.MORE | Category.ROOT:
                return ""


# Top-level list nodes, in display order, with their labels.
ROOT_CATEGORIES: tuple[tuple[str, Category], ...] = (
    ("Pipelines", Category.PIPELINE_LIST),
    ("PipelineRuns", Category.PIPELINE_RUN_LIST),
    ("Tasks", Category.TASK_LIST),
    ("ClusterTasks", Category.CLUSTER_TASK_LIST),
    ("TaskRuns", Category.TASK_RUN_LIST),
    ("PipelineResources", Category.PIPELINE_RESOURCE_LIST),
    ("TriggerTemplates", Category.TRIGGER_TEMPLATE_LIST),
    ("TriggerBinding", Category.TRIGGER_BINDING_LIST),
    ("EventListener", Category.EVENT_LISTENER_LIST),
    ("Conditions", Category.CONDITION_LIST),
    ("ClusterTriggerBinding", Category.CLUSTER_TRIGGER_BINDING_LIST),
)

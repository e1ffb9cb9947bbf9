"""Command protocol: argument vectors for the tkn and kubectl tool families."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum


class ToolFamily(Enum):
    """The two external command-line tools."""

    TKN = "tkn"
    KUBECTL = "kubectl"

    def __str__(self) -> str:
        return self.value


@dataclass
class CliCommand:
    """A tool invocation: which tool, and its ordered arguments."""

    tool: ToolFamily
    args: list[str] = field(default_factory=list)

    def argv(self, tool_location: str | None = None) -> list[str]:
        """Full argument vector, optionally with the tool's resolved path."""
        return [tool_location or self.tool.value, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv())


def tkn(*args: str) -> CliCommand:
    return CliCommand(ToolFamily.TKN, list(args))


def kubectl(*args: str) -> CliCommand:
    return CliCommand(ToolFamily.KUBECTL, list(args))


class Commands:
    """Builds the commands the tree engine and the terminal workflows issue.

    When ``verbosity`` > 0, listing and terminal commands get ``-v N``
    appended. Watch and health-check commands never do, since their output
    is parsed line by line.
    """

    def __init__(self, verbosity: int = 0) -> None:
        self.verbosity = verbosity

    def _verbose(self, command: CliCommand) -> CliCommand:
        if self.verbosity > 0:
            command.args.extend(["-v", str(self.verbosity)])
        return command

    # ---- JSON listings consumed by the fetcher ----

    def list_pipelines(self) -> CliCommand:
        return self._verbose(kubectl("get", "pipeline", "-o", "json"))

    def list_pipeline_runs(self) -> CliCommand:
        return self._verbose(kubectl("get", "pipelinerun", "-o", "json"))

    def list_pipeline_runs_for_pipeline(self, pipeline: str) -> CliCommand:
        return self._verbose(
            kubectl("get", "pipelinerun", "-l", f"tekton.dev/pipeline={pipeline}", "-o", "json")
        )

    def list_tasks(self, namespace: str | None = None) -> CliCommand:
        return self._verbose(kubectl("get", "task", *_namespace(namespace), "-o", "json"))

    def list_cluster_tasks(self) -> CliCommand:
        return self._verbose(kubectl("get", "clustertask", "-o", "json"))

    def list_task_runs(self) -> CliCommand:
        return self._verbose(kubectl("get", "taskrun", "-o", "json"))

    def list_task_runs_for_task(self, task: str) -> CliCommand:
        return self._verbose(
            kubectl("get", "taskrun", "-l", f"tekton.dev/task={task}", "-o", "json")
        )

    def list_task_runs_for_pipeline_run(self, pipeline_run: str) -> CliCommand:
        return self._verbose(
            kubectl("get", "taskrun", "-l", f"tekton.dev/pipelineRun={pipeline_run}", "-o", "json")
        )

    def list_pipeline_resources(self) -> CliCommand:
        return self._verbose(kubectl("get", "pipelineresources", "-o", "json"))

    def list_trigger_templates(self) -> CliCommand:
        return self._verbose(kubectl("get", "triggertemplates", "-o", "json"))

    def list_trigger_bindings(self) -> CliCommand:
        return self._verbose(kubectl("get", "triggerbinding", "-o", "json"))

    def list_cluster_trigger_bindings(self) -> CliCommand:
        return kubectl("get", "clustertriggerbinding", "-o", "json")

    def list_event_listeners(self) -> CliCommand:
        return self._verbose(kubectl("get", "eventlistener", "-o", "json"))

    def list_conditions(self) -> CliCommand:
        return kubectl("get", "conditions", "-o", "json")

    # ---- Watches and health check ----

    def watch_resource(self, kind: str, name: str) -> CliCommand:
        return kubectl("get", kind, name, "-w", "-o", "json")

    def can_i_create_pipelines(self) -> CliCommand:
        return kubectl("auth", "can-i", "create", "pipeline.tekton.dev")

    def get_pipeline_crd(self) -> CliCommand:
        return kubectl("get", "pipeline.tekton.dev")

    # ---- Terminal commands ----

    def show_logs(self, kind: str, name: str, follow: bool = False) -> CliCommand:
        command = tkn(kind, "logs", name)
        if follow:
            command.args.append("-f")
        return self._verbose(command)

    def list_in_terminal(self, kind: str) -> CliCommand:
        return self._verbose(tkn(kind, "list"))


def _namespace(namespace: str | None) -> list[str]:
    return ["-n", namespace] if namespace else []

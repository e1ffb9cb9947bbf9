"""Tests for ResourceFetcher: listing output -> sorted, deduplicated nodes."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import FakeExecutor, item
from tektontree.process.command import Commands
from tektontree.process.result import ExitData
from tektontree.tree.category import Category, RunState
from tektontree.tree.fetcher import ResourceFetcher, sort_nodes
from tektontree.tree.models import parse_items
from tektontree.tree.nodes import RunNode, TreeNode


@pytest.fixture
def fetcher(executor: FakeExecutor, commands: Commands) -> ResourceFetcher:
    return ResourceFetcher(executor, commands)


def list_node(category: Category, name: str = "list") -> TreeNode:
    return TreeNode(name=name, category=category)


class TestCommandSelection:
    def test_runs_of_a_pipeline(self, fetcher, commands):
        pipeline = TreeNode(name="build", category=Category.PIPELINE)
        assert fetcher.command_for(Category.PIPELINE_RUN, pipeline) == (
            commands.list_pipeline_runs_for_pipeline("build")
        )

    def test_all_pipeline_runs(self, fetcher, commands):
        assert fetcher.command_for(
            Category.PIPELINE_RUN, list_node(Category.PIPELINE_RUN_LIST)
        ) == commands.list_pipeline_runs()

    @pytest.mark.parametrize("parent_category", [Category.TASK, Category.CLUSTER_TASK])
    def test_runs_of_a_task(self, fetcher, commands, parent_category):
        task = TreeNode(name="lint", category=parent_category)
        assert fetcher.command_for(Category.TASK_RUN, task) == commands.list_task_runs_for_task("lint")

    def test_task_runs_of_a_pipeline_run(self, fetcher, commands):
        run = TreeNode(name="build-x1", category=Category.PIPELINE_RUN)
        assert fetcher.command_for(Category.TASK_RUN, run) == (
            commands.list_task_runs_for_pipeline_run("build-x1")
        )

    def test_no_command_for_synthetic(self, fetcher):
        with pytest.raises(ValueError):
            fetcher.command_for(Category.MORE, list_node(Category.ROOT))


class TestFetch:
    async def test_non_runs_sorted_by_name(self, fetcher, executor, commands):
        executor.respond_items(commands.list_tasks(), item("zeta"), item("alpha"), item("mid"))
        parent = list_node(Category.TASK_LIST)

        nodes = await fetcher.fetch(Category.TASK, parent)

        assert [n.name for n in nodes] == ["alpha", "mid", "zeta"]
        assert all(n.category is Category.TASK and n.parent is parent for n in nodes)

    async def test_duplicates_dropped(self, fetcher, executor, commands):
        executor.respond_items(
            commands.list_pipelines(), item("build"), item("deploy"), item("build")
        )
        nodes = await fetcher.fetch(Category.PIPELINE, list_node(Category.PIPELINE_LIST))
        assert [n.name for n in nodes] == ["build", "deploy"]

    async def test_runs_newest_first(self, fetcher, executor, commands):
        executor.respond_items(
            commands.list_pipeline_runs(),
            item("old", created="2024-01-01T10:00:00Z", status="True"),
            item("new", created="2024-01-03T10:00:00Z", status="Unknown"),
            item("undated"),
            item("mid", created="2024-01-02T10:00:00Z", status="False"),
        )
        nodes = await fetcher.fetch(Category.PIPELINE_RUN, list_node(Category.PIPELINE_RUN_LIST))

        assert [n.name for n in nodes] == ["new", "mid", "old", "undated"]
        assert [n.state for n in nodes] == [
            RunState.UNKNOWN,
            RunState.FALSE,
            RunState.TRUE,
            None,
        ]
        assert all(isinstance(n, RunNode) for n in nodes)

    async def test_run_fields(self, fetcher, executor, commands):
        executor.respond_items(
            commands.list_task_runs_for_pipeline_run("build-x1"),
            item(
                "build-x1-lint-abcde",
                created="2024-01-01T10:00:00Z",
                completed="2024-01-01T10:01:30Z",
                status="True",
                labels={"tekton.dev/pipelineTask": "lint"},
            ),
        )
        parent = TreeNode(name="build-x1", category=Category.PIPELINE_RUN)

        [node] = await fetcher.fetch(Category.TASK_RUN, parent)

        assert node.label == "lint"
        assert node.started == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert node.finished == datetime(2024, 1, 1, 10, 1, 30, tzinfo=timezone.utc)
        assert node.describe() == "finished in 1m 30s"

    async def test_failure_becomes_placeholder(self, fetcher, executor, commands):
        executor.fail(commands.list_conditions(), 'error: the server doesn\'t have a resource type "conditions"')
        parent = list_node(Category.CONDITION_LIST)

        [node] = await fetcher.fetch(Category.CONDITION, parent)

        assert node.category is Category.UNAVAILABLE
        assert "conditions" in node.name
        assert node.parent is parent

    async def test_malformed_output_is_empty(self, fetcher, executor, commands):
        executor.respond(commands.list_tasks(), ExitData(succeeded=True, stdout="not json", exit_code=0))
        assert await fetcher.fetch(Category.TASK, list_node(Category.TASK_LIST)) == []

    async def test_each_fetch_runs_the_command(self, fetcher, executor, commands):
        parent = list_node(Category.TASK_LIST)
        first = await fetcher.fetch(Category.TASK, parent)
        second = await fetcher.fetch(Category.TASK, parent)
        assert first == second == []
        assert executor.calls.count(str(commands.list_tasks())) == 2


class TestSortNodes:
    def test_equal_timestamps_keep_fetch_order(self):
        stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        nodes = [
            RunNode(name=name, category=Category.PIPELINE_RUN, creation_timestamp=stamp)
            for name in ("b", "a", "c")
        ]
        assert [n.name for n in sort_nodes(Category.PIPELINE_RUN, nodes)] == ["b", "a", "c"]


class TestParseItems:
    def test_missing_items_key(self):
        assert parse_items('{"kind": "List"}') == []

    def test_null_items(self):
        assert parse_items('{"items": null}') == []

    def test_item_without_name_invalidates_listing(self):
        assert parse_items('{"items": [{"metadata": {"name": "a"}}, {"metadata": {}}]}') == []

    def test_unknown_fields_ignored(self):
        [parsed] = parse_items('{"items": [{"metadata": {"name": "a", "uid": "1"}, "extra": 1}]}')
        assert parsed.name == "a"


class TestStartTrigger:
    async def test_task_resources_flattened(self, fetcher, executor, commands):
        executor.respond_items(
            commands.list_tasks(),
            item("other"),
            item(
                "build-image",
                spec={
                    "resources": {
                        "inputs": [{"name": "source", "type": "git"}],
                        "outputs": [{"name": "image", "type": "image"}],
                    },
                    "params": [{"name": "tag", "default": "latest"}],
                },
            ),
        )
        trigger = await fetcher.get_start_trigger(Category.TASK, "build-image")

        assert trigger is not None
        assert [(r.name, r.type, r.resource_type) for r in trigger.resources] == [
            ("source", "git", "inputs"),
            ("image", "image", "outputs"),
        ]
        assert trigger.params[0].default == "latest"

    async def test_pipeline_resources_pass_through(self, fetcher, executor, commands):
        executor.respond_items(
            commands.list_pipelines(),
            item("build", spec={"resources": [{"name": "repo", "type": "git"}]}),
        )
        trigger = await fetcher.get_start_trigger(Category.PIPELINE, "build")
        assert trigger is not None
        assert [(r.name, r.resource_type) for r in trigger.resources] == [("repo", None)]

    async def test_unknown_name(self, fetcher, executor, commands):
        executor.respond_items(commands.list_cluster_tasks(), item("git-clone"))
        assert await fetcher.get_start_trigger(Category.CLUSTER_TASK, "missing") is None

    async def test_listing_failure(self, fetcher, executor, commands):
        executor.fail(commands.list_tasks(), "forbidden")
        assert await fetcher.get_raw_tasks() == []

    async def test_runs_cannot_be_started(self, fetcher):
        with pytest.raises(ValueError):
            await fetcher.get_start_trigger(Category.TASK_RUN, "x")

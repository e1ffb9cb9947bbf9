"""Tests for the tektontree CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console

from tektontree.cli import build_config, create_parser, run_cli, watch_tree
from tektontree.config import reset_config
from tektontree.render import render_tree


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    reset_config()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("TEKTONTREE_PAGE_SIZE", raising=False)
    yield
    reset_config()


class TestParser:
    def test_tree_defaults(self):
        args = create_parser().parse_args(["tree"])
        assert args.mode == "tree"
        assert args.depth == 2
        assert args.verbose == 0

    def test_watch_options(self):
        args = create_parser().parse_args(["-vv", "watch", "--depth", "3", "--interval", "5"])
        assert (args.mode, args.depth, args.interval, args.verbose) == ("watch", 3, 5.0, 2)

    def test_logs(self):
        args = create_parser().parse_args(["logs", "taskrun", "build-x1-lint", "-f"])
        assert (args.kind, args.name, args.follow) == ("taskrun", "build-x1-lint", True)

    def test_list_rejects_unknown_kind(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["list", "deployment"])

    def test_page_size_must_be_positive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--page-size", "0", "tree"])


class TestBuildConfig:
    def test_overrides(self, tmp_path: Path):
        config_file = tmp_path / "extra.yaml"
        config_file.write_text("tree:\n  page_size: 9\n  output_verbosity: 1\n")
        args = create_parser().parse_args(
            ["--config", str(config_file), "--output-verbosity", "3", "-v", "tree"]
        )

        config = build_config(args)

        assert config.tree.page_size == 9
        assert config.tree.output_verbosity == 3
        assert config.logging.verbose == 3

    def test_page_size_flag(self):
        args = create_parser().parse_args(["--page-size", "7", "tree"])
        assert build_config(args).tree.page_size == 7


class TestRunCli:
    def test_no_mode_prints_help(self, capsys):
        assert run_cli([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_logs_runs_in_terminal(self):
        with patch(
            "tektontree.process.executor.SubprocessCommandExecutor.execute_in_terminal",
            new=AsyncMock(return_value=0),
        ) as execute:
            assert run_cli(["logs", "pipelinerun", "build-x1", "--follow"]) == 0

        command = execute.await_args.args[0]
        assert str(command) == "tkn pipelinerun logs build-x1 -f"

    def test_list_returns_exit_code(self):
        with patch(
            "tektontree.process.executor.SubprocessCommandExecutor.execute_in_terminal",
            new=AsyncMock(return_value=3),
        ) as execute:
            assert run_cli(["list", "clustertask"]) == 3

        assert str(execute.await_args.args[0]) == "tkn clustertask list"


class TestWatchTree:
    async def test_rerenders_on_refresh(self, provider):
        console = Console(record=True, width=100, color_system=None)
        with patch("tektontree.cli.render_tree", wraps=render_tree) as render:
            task = asyncio.create_task(watch_tree(provider, console, depth=1, interval=60))
            for _ in range(100):
                if render.await_count >= 1:
                    break
                await asyncio.sleep(0.01)

            provider.refresh()
            for _ in range(100):
                if render.await_count >= 2:
                    break
                await asyncio.sleep(0.01)

            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert render.await_count >= 2
        assert provider._listeners == []

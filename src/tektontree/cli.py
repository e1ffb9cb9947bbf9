"""Command-line interface for tektontree."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.live import Live

from tektontree import __version__
from tektontree.config import Config, load_config
from tektontree.logging import get_logger, setup_logging
from tektontree.render import render_tree
from tektontree.tree.provider import TreeContext, TreeProvider

log = get_logger("cli")

LOG_KINDS = ("pipelinerun", "taskrun")
LIST_KINDS = ("pipeline", "pipelinerun", "task", "clustertask", "taskrun", "resource")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tektontree",
        description="Browse Tekton pipelines, runs and triggers as a live tree",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be repeated)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Extra config file, applied over system and user config",
    )
    parser.add_argument(
        "--page-size",
        type=_positive_int,
        help="Children shown per run list before a 'more' node",
    )
    parser.add_argument(
        "--output-verbosity",
        type=int,
        help="Pass -v N to tkn/kubectl",
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operating mode")

    tree_parser = subparsers.add_parser("tree", help="Print the tree once")
    tree_parser.add_argument(
        "--depth", type=_positive_int, default=2, help="Levels to expand below the categories"
    )

    watch_parser = subparsers.add_parser("watch", help="Keep the tree on screen, refreshing as runs change")
    watch_parser.add_argument(
        "--depth", type=_positive_int, default=2, help="Levels to expand below the categories"
    )
    watch_parser.add_argument(
        "--interval", type=float, default=30.0, help="Seconds between unconditional refreshes"
    )

    logs_parser = subparsers.add_parser("logs", help="Stream the logs of a run")
    logs_parser.add_argument("kind", choices=LOG_KINDS)
    logs_parser.add_argument("name")
    logs_parser.add_argument("-f", "--follow", action="store_true", help="Follow the log")

    list_parser = subparsers.add_parser("list", help="Run `tkn <kind> list` in the terminal")
    list_parser.add_argument("kind", choices=LIST_KINDS)

    return parser


def build_config(parsed: argparse.Namespace) -> Config:
    """Load configuration and apply command-line overrides."""
    config = load_config(config_file=parsed.config)
    if parsed.page_size is not None:
        config.tree.page_size = parsed.page_size
    if parsed.output_verbosity is not None and parsed.output_verbosity >= 0:
        config.tree.output_verbosity = parsed.output_verbosity
    if parsed.verbose:
        config.logging.verbose = min(4, 2 + parsed.verbose)
    return config


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.mode is None:
        parser.print_help()
        return 1

    config = build_config(parsed)
    setup_logging(config.logging)
    console = Console()

    try:
        return asyncio.run(_run_mode(parsed, config, console))
    except KeyboardInterrupt:
        return 130


async def _run_mode(parsed: argparse.Namespace, config: Config, console: Console) -> int:
    provider = TreeProvider(TreeContext.from_config(config))
    context = provider.context
    try:
        match parsed.mode:
            case "tree":
                console.print(await render_tree(provider, parsed.depth))
                return 0
            case "watch":
                await watch_tree(provider, console, parsed.depth, parsed.interval)
                return 0
            case "logs":
                command = context.commands.show_logs(parsed.kind, parsed.name, follow=parsed.follow)
                return await context.executor.execute_in_terminal(command)
            case "list":
                command = context.commands.list_in_terminal(parsed.kind)
                return await context.executor.execute_in_terminal(command)
            case _:
                log.error("Unknown mode: %s", parsed.mode)
                return 1
    finally:
        provider.dispose()


async def watch_tree(
    provider: TreeProvider,
    console: Console,
    depth: int,
    interval: float,
) -> None:
    """Re-render whenever the provider signals a refresh, or every ``interval`` seconds."""
    stale = asyncio.Event()
    unsubscribe = provider.on_refresh(lambda _node: stale.set())
    try:
        with Live(await render_tree(provider, depth), console=console, refresh_per_second=4) as live:
            while True:
                try:
                    await asyncio.wait_for(stale.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
                stale.clear()
                live.update(await render_tree(provider, depth))
    finally:
        unsubscribe()

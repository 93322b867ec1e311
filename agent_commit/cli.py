#!/usr/bin/env python3
"""
Agent-Commit CLI Interface

Command-line access to the commit pipeline and the edit classifier.

Usage:
    agent-commit [options] <command>

Commands:
    commit [-m MESSAGE]   Stage and commit the working tree now (manual policy)
    revert [-y]           Undo the last commit, keeping its changes (soft reset)
    status                Show working tree counts and the last commit
    replay FILE           Feed a JSON-lines edit event log through the classifier

Options:
    -r, --root PATH       Repository path (default: current directory)
    -c, --config FILE     JSON settings file
    -v, --verbose         Enable verbose output
    --version             Show version information
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from agent_commit import __version__
from agent_commit.config import Config
from agent_commit.controller import WorkspaceController
from agent_commit.exceptions import BackendError, InvalidEditEventError
from agent_commit.models import EditEvent, parse_timestamp
from agent_commit.notifications import Notifier
from agent_commit.utils import configure_logging, console


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="agent-commit",
        description="Agent-Commit: automatic commits for agent-generated edits",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-r", "--root",
        type=Path,
        default=Path.cwd(),
        help="Path to the Git repository (default: current directory)",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="JSON settings file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version information",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    commit = subparsers.add_parser("commit", help="Stage and commit the working tree now")
    commit.add_argument("-m", "--message", type=str, default=None, help="Commit message to use")

    revert = subparsers.add_parser("revert", help="Undo the last commit, keeping its changes")
    revert.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    subparsers.add_parser("status", help="Show working tree counts and the last commit")

    replay = subparsers.add_parser("replay", help="Classify a JSON-lines edit event log")
    replay.add_argument("file", type=str, help="Event log path, or - for stdin")

    return parser


def load_config(path: Optional[Path]) -> Config:
    if path is None:
        return Config()
    return Config.load(path)


def validate_path(path: Path) -> Optional[Path]:
    """Validate the repository path."""
    repo_path = path.resolve()
    if not repo_path.exists():
        console.print(f"[red]Error: Path does not exist: {escape(str(repo_path))}[/red]")
        return None
    return repo_path


async def run_commit(controller: WorkspaceController, message: Optional[str]) -> int:
    outcome = await controller.commit_now(message)
    if outcome.success:
        console.print(f"[green]Committed {(outcome.hash or '')[:8]}:[/green] {escape(outcome.message)}")
        return 0
    console.print(f"[red]Commit failed: {escape(outcome.error or 'Unknown error')}[/red]")
    return 1


async def run_revert(controller: WorkspaceController, assume_yes: bool) -> int:
    if not assume_yes and not Confirm.ask("Are you sure you want to revert the last commit?",
                                          console=console):
        console.print("[yellow]Revert cancelled[/yellow]")
        return 1
    if await controller.revert_last():
        console.print("[green]Last commit reverted successfully[/green]")
        return 0
    console.print("[red]Failed to revert last commit[/red]")
    return 1


async def run_status(controller: WorkspaceController) -> int:
    summary = await controller.status_summary()

    table = Table(title="Agent-Commit Status", show_header=False)
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")
    table.add_row("Enabled", "Yes" if summary["enabled"] else "No")
    table.add_row("Commit Frequency", str(summary["commit_frequency"]))
    table.add_row("Auto Stage", "Yes" if summary["auto_stage"] else "No")
    for key in ("modified", "created", "deleted", "renamed", "staged"):
        table.add_row(key.capitalize(), str(summary[key]))
    table.add_row("Last Commit", str(summary["last_commit"] or "-"))
    console.print(table)

    for path in summary["files"]:
        console.print(f"  • {escape(path)}")
    return 0


def run_replay(controller: WorkspaceController, stream: TextIO) -> int:
    """Classify each JSON line in ``stream``; lines may also be ``{"action": "undo"}``.

    A line without a timestamp is taken to happen at the previous line's time.
    """
    last_timestamp = 0.0
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
            if isinstance(payload, dict) and payload.get("action") in ("undo", "redo"):
                last_timestamp = parse_timestamp(payload.get("timestamp", last_timestamp))
                controller.classifier.flag_human_action(payload["action"], now=last_timestamp)
                continue
            event = EditEvent.from_raw(payload, last_timestamp)
            last_timestamp = event.timestamp
            mode = controller.classifier.observe(event)
        except (json.JSONDecodeError, InvalidEditEventError) as e:
            console.print(f"[red]Line {lineno}: {escape(str(e))}[/red]")
            return 1
        console.print(f"[dim]{lineno:>4}[/dim] {mode.value}")

    controller.classifier.dispose()
    console.print(f"Final mode: [bold]{controller.mode.value}[/bold]")
    history = controller.classifier.session_history
    if history:
        table = Table(title="Typing sessions")
        table.add_column("Start", justify="right")
        table.add_column("Characters", justify="right")
        table.add_column("Duration (s)", justify="right")
        for record in history:
            table.add_row(f"{record.start_time:.3f}", str(record.characters), f"{record.duration:.3f}")
        console.print(table)
    return 0


def main_cli(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    repo_path = validate_path(args.root)
    if not repo_path:
        return 1

    controller = WorkspaceController.for_repository(
        repo_path, config, notifier=Notifier(show_notifications=False, console=console))

    try:
        if args.command == "commit":
            return asyncio.run(run_commit(controller, args.message))
        if args.command == "revert":
            return asyncio.run(run_revert(controller, args.yes))
        if args.command == "status":
            return asyncio.run(run_status(controller))
        if args.command == "replay":
            if args.file == "-":
                return run_replay(controller, sys.stdin)
            with open(args.file, "r", encoding="utf-8") as stream:
                return run_replay(controller, stream)
        parser.error(f"Unknown command: {args.command}")
    except KeyboardInterrupt:
        console.print("\nOperation cancelled by user")
        return 130
    except (BackendError, OSError) as e:
        if args.verbose:
            raise
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    finally:
        controller.dispose()
    return 1


if __name__ == "__main__":
    sys.exit(main_cli())

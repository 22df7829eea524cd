"""Command-line helpers for workflow maintenance.

``workflowkit env`` prints what the launcher exposed to this process and
``workflowkit clear-cache`` / ``clear-data`` empty the workflow directories.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from .environment import Environment
from .store import empty_directory


def _json_default(value: object) -> str:
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def describe_environment(environment: Environment) -> dict[str, object]:
    return {
        "launcher": asdict(environment.launcher),
        "workflow": asdict(environment.workflow),
        "cache_dir": environment.cache_dir,
        "data_dir": environment.data_dir,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflowkit",
        description="Inspect and maintain a launcher workflow's environment.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("env", help="print launcher and workflow metadata as JSON")
    subparsers.add_parser("clear-cache", help="empty the workflow cache directory")
    subparsers.add_parser("clear-data", help="empty the workflow data directory")
    return parser


def main(argv: list[str] | None = None, environment: Environment | None = None) -> int:
    """Run one maintenance command; returns the process exit status."""
    args = build_parser().parse_args(argv)
    env = environment if environment is not None else Environment.from_os()

    if args.command == "env":
        print(json.dumps(describe_environment(env), indent=2, default=_json_default))
        return 0

    target = env.cache_dir if args.command == "clear-cache" else env.data_dir
    try:
        empty_directory(target)
    except OSError as exc:
        print(f"workflowkit: could not clear {target}: {exc}", file=sys.stderr)
        return 1
    print(f"Cleared {target}")
    return 0

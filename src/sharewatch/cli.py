"""
Sharewatch CLI entry point.

This module provides the command-line interface for Sharewatch.
"""

from __future__ import annotations

import argparse
import sys

from sharewatch import __version__
from sharewatch.cli_commands import cmd_config, cmd_run
from sharewatch.cli_watch import cmd_watch
from sharewatch.observability import configure_logging


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="sharewatch",
        description="Sharewatch - alerts owners of publicly shared Drive items",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"sharewatch {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    parser.add_argument(
        "-c",
        "--config",
        help="Path to YAML/JSON configuration (default: SHAREWATCH_* environment)",
    )

    parser.add_argument(
        "--log-format",
        choices=["human", "json"],
        default="human",
        help="Log output format (default: human)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run one detection pass")
    run_parser.add_argument(
        "--lookback-hours",
        type=float,
        help="Override the lookback window in hours",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Detect and render alerts without sending them",
    )
    run_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    # watch command
    watch_parser = subparsers.add_parser("watch", help="Run detection passes periodically")
    watch_parser.add_argument(
        "--interval",
        type=int,
        default=3600,
        help="Seconds between runs (default: 3600)",
    )
    watch_parser.add_argument(
        "--max-iterations",
        type=int,
        default=0,
        help="Stop after N runs (default: unlimited)",
    )
    watch_parser.add_argument(
        "--lookback-hours",
        type=float,
        help="Override the lookback window in hours",
    )
    watch_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Detect and render alerts without sending them",
    )
    watch_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    # config command
    config_parser = subparsers.add_parser("config", help="Inspect configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser("show", help="Print the effective configuration")
    config_subparsers.add_parser("validate", help="Validate the configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        level = "WARNING"
    elif args.verbose > 1:
        level = "DEBUG"
    else:
        level = "INFO"
    configure_logging(level=level, format=args.log_format)

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "run": cmd_run,
        "watch": cmd_watch,
        "config": cmd_config,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

"""
CLI command handlers for Sharewatch.
"""

from __future__ import annotations

import argparse
import json
import logging

from sharewatch.config import ConfigLoader, MonitorConfig
from sharewatch.errors import ConfigError
from sharewatch.pipeline import ExposurePipeline, RunResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2


def load_monitor_config(args: argparse.Namespace) -> MonitorConfig:
    """
    Load configuration and apply command-line overrides.

    Raises:
        ConfigError: If the configuration is missing or invalid
    """
    config = ConfigLoader(getattr(args, "config", None)).load()

    lookback = getattr(args, "lookback_hours", None)
    if lookback is not None:
        config = config.with_overrides(lookback_window_hours=lookback)

    return config


def exit_code_for(result: RunResult) -> int:
    """Map a run result to a process exit code."""
    if result.failed:
        return EXIT_FAILED
    if result.notification_failures:
        return EXIT_PARTIAL
    return EXIT_OK


def print_run_result(result: RunResult, output_format: str = "table") -> None:
    """Print a run result as a table or JSON."""
    if output_format == "json":
        print(json.dumps(result.to_dict(), indent=2))
        return

    print("")
    print(f"Run: {result.run_id}")
    print(f"Window start: {result.window_start}")
    print(f"Stopped after: {result.last_stage.value}")
    if result.failed:
        print(f"Audit fetch failed: {result.fetch_error}")
        print(f"Operations contact notified: {'yes' if result.operations_notified else 'no'}")
        return

    print(f"Audit events: {result.events_fetched}")
    print(f"Candidates: {result.candidate_count}")
    print(f"Confirmed exposures: {len(result.confirmed)}")
    print("")

    if result.confirmed:
        print(f"{'Owner':<32} {'Exposure':<36} {'Title'}")
        print("-" * 100)
        for exposure in result.confirmed:
            title = exposure.title or exposure.document_id
            if len(title) > 30:
                title = title[:27] + "..."
            print(f"{exposure.owner_email:<32} {exposure.exposure_label:<36} {title}")
        print("")

    if result.dispatch:
        print(f"Owners notified: {len(result.dispatch.sent)}")
        for owner, error in result.dispatch.failures.items():
            print(f"  FAILED {owner}: {error}")


def cmd_run(args: argparse.Namespace) -> int:
    """
    Execute one detection run.

    Returns:
        Exit code (0 success, 1 fetch or config failure, 2 partial delivery)
    """
    try:
        config = load_monitor_config(args)
        pipeline = ExposurePipeline.from_config(
            config, dry_run=getattr(args, "dry_run", False)
        )
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return EXIT_FAILED

    result = pipeline.run()
    print_run_result(result, getattr(args, "format", "table"))
    return exit_code_for(result)


def cmd_config(args: argparse.Namespace) -> int:
    """
    Show or validate configuration.

    Returns:
        Exit code (0 success, 1 error)
    """
    action = getattr(args, "config_action", None)

    if action is None:
        print("Usage: sharewatch config <command>")
        print("")
        print("Commands:")
        print("  show       Print the effective configuration (secrets masked)")
        print("  validate   Check the configuration")
        return EXIT_OK

    if action not in ("show", "validate"):
        print(f"Unknown config command: {action}")
        return EXIT_FAILED

    try:
        config = load_monitor_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return EXIT_FAILED

    if action == "show":
        print(json.dumps(config.to_dict(), indent=2))
        return EXIT_OK

    if not config.workspace.has_credentials:
        print("Configuration error: no service account credentials configured")
        return EXIT_FAILED

    print("Configuration is valid")
    return EXIT_OK

"""
Watch mode for Sharewatch.

Runs the detection pipeline repeatedly on a fixed interval. Runs never
overlap: the next one starts only after the previous one has returned.
"""

from __future__ import annotations

import argparse
import signal
import threading
from dataclasses import dataclass
from typing import Any, Callable

from sharewatch import __version__
from sharewatch.cli_commands import EXIT_FAILED, EXIT_OK, load_monitor_config, print_run_result
from sharewatch.errors import ConfigError
from sharewatch.pipeline import ExposurePipeline, RunResult


@dataclass
class WatchConfig:
    """
    Configuration for watch mode.

    Attributes:
        interval_seconds: Time between the end of a run and the next one
        max_iterations: Maximum runs (0 = unlimited)
        quiet: Suppress non-essential output
        output_format: Output format (table/json)
    """

    interval_seconds: int = 3600
    max_iterations: int = 0
    quiet: bool = False
    output_format: str = "table"


class WatchMode:
    """Serial, periodic pipeline runs."""

    def __init__(self, pipeline: ExposurePipeline, config: WatchConfig | None = None):
        self._pipeline = pipeline
        self._config = config or WatchConfig()
        self._running = False
        self._stop_event = threading.Event()
        self._iteration = 0
        self._results: list[RunResult] = []
        self._callbacks: list[Callable[[RunResult], None]] = []

    @property
    def config(self) -> WatchConfig:
        """Get watch configuration."""
        return self._config

    @property
    def is_running(self) -> bool:
        """Check if watch mode is running."""
        return self._running

    @property
    def iteration_count(self) -> int:
        """Get current iteration count."""
        return self._iteration

    @property
    def results(self) -> list[RunResult]:
        """Get results of completed runs."""
        return self._results.copy()

    def add_callback(self, callback: Callable[[RunResult], None]) -> None:
        """Add a callback called after each run."""
        self._callbacks.append(callback)

    def start(self, install_signal_handlers: bool = True) -> None:
        """
        Start watch mode.

        Runs until stop() is called or max_iterations is reached.
        """
        self._running = True
        self._stop_event.clear()

        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._handle_signal)
            signal.signal(signal.SIGTERM, self._handle_signal)

        self._print(f"Sharewatch watch mode v{__version__}, interval {self._config.interval_seconds}s")

        try:
            while self._running:
                if self._config.max_iterations and self._iteration >= self._config.max_iterations:
                    self._print("Maximum iterations reached.")
                    break

                self._iteration += 1
                result = self._pipeline.run()
                self._results.append(result)

                if not self._config.quiet:
                    print_run_result(result, self._config.output_format)
                for callback in self._callbacks:
                    callback(result)

                if not self._running:
                    break
                if self._config.max_iterations and self._iteration >= self._config.max_iterations:
                    continue
                self._stop_event.wait(self._config.interval_seconds)
        finally:
            self._running = False
            self._print(f"Watch mode stopped after {self._iteration} run(s)")

    def stop(self) -> None:
        """Stop watch mode."""
        self._running = False
        self._stop_event.set()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self._print("Stopping watch mode...")
        self.stop()

    def _print(self, message: str) -> None:
        if not self._config.quiet:
            print(message)


def cmd_watch(args: argparse.Namespace) -> int:
    """
    Run the pipeline periodically.

    Returns:
        Exit code (0 success, 1 configuration error)
    """
    try:
        config = load_monitor_config(args)
        pipeline = ExposurePipeline.from_config(
            config, dry_run=getattr(args, "dry_run", False)
        )
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return EXIT_FAILED

    watch = WatchMode(
        pipeline,
        WatchConfig(
            interval_seconds=getattr(args, "interval", 3600),
            max_iterations=getattr(args, "max_iterations", 0),
            quiet=getattr(args, "quiet", False),
            output_format=getattr(args, "format", "table"),
        ),
    )
    watch.start()
    return EXIT_OK

"""
Structured logging configuration for Sharewatch.

Provides consistent logging across all modules with a JSON formatter
for log aggregation and a human-readable formatter for terminals.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "sharewatch"

# LogRecord attributes that are not user-supplied extra fields
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


def _utc(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line: timestamp, level, logger, message, then any
    extra fields passed to the log call (run_id, event_type, ...).
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        entry: dict[str, Any] = {}
        if self.include_timestamp:
            entry["timestamp"] = _utc(record).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
        entry.update(
            level=record.levelname.lower(),
            logger=record.name,
            message=record.getMessage(),
        )
        if self.include_location:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS
        )
        entry.update(self.extra_fields)
        return json.dumps(entry, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Single-line terminal output, level colored when stderr is a TTY."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        level = f"{record.levelname:>8}"
        if self.use_colors and record.levelname in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelname]}{level}{self.RESET}"

        line = (
            f"[{_utc(record):%Y-%m-%d %H:%M:%S}] {level} "
            f"{record.name}: {record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class SharewatchLogger:
    """
    Wrapper around Python logging carrying run context.

    Provides event helpers for the run lifecycle so structured logs share
    the same event_type vocabulary.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self._context: dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context fields for all logs."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        """Clear context fields."""
        self._context.clear()

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        extra = {**self._context, **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def run_started(self, run_id: str, window_start: str) -> None:
        """Log run start event."""
        self.info(
            "Run started",
            event_type="run.started",
            run_id=run_id,
            window_start=window_start,
        )

    def run_completed(
        self,
        run_id: str,
        stage: str,
        events: int,
        candidates: int,
        confirmed: int,
        notified: int,
        duration_seconds: float,
    ) -> None:
        """Log run completion event."""
        self.info(
            "Run completed",
            event_type="run.completed",
            run_id=run_id,
            stage=stage,
            events=events,
            candidates=candidates,
            confirmed=confirmed,
            notified=notified,
            duration_seconds=duration_seconds,
        )

    def run_failed(self, run_id: str, error: str) -> None:
        """Log run failure event."""
        self.error(
            "Run failed",
            event_type="run.failed",
            run_id=run_id,
            error=error,
        )

    def exposure_confirmed(
        self, document_id: str, owner_email: str, exposure_level: str
    ) -> None:
        """Log a confirmed exposure."""
        self.debug(
            "Exposure confirmed",
            event_type="exposure.confirmed",
            document_id=document_id,
            owner_email=owner_email,
            exposure_level=exposure_level,
        )

    def notification_failed(self, recipient: str, error: str) -> None:
        """Log a per-recipient notification failure."""
        self.error(
            "Notification failed",
            event_type="notification.failed",
            recipient=recipient,
            error=error,
        )


def configure_logging(
    level: str = "INFO",
    format: str = "human",
    output: str = "stderr",
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure logging for Sharewatch.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (human, json)
        output: Output destination (stderr, stdout)
        extra_fields: Extra fields to include in structured logs
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.handlers.clear()

    if output == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stderr)

    if format == "json":
        formatter: logging.Formatter = StructuredFormatter(extra_fields=extra_fields)
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> SharewatchLogger:
    """
    Get a Sharewatch logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        SharewatchLogger instance
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return SharewatchLogger(name)
    return SharewatchLogger(f"{ROOT_LOGGER_NAME}.{name}")


# Configure logging from environment on import
_log_level = os.getenv("SHAREWATCH_LOG_LEVEL", "INFO")
_log_format = os.getenv("SHAREWATCH_LOG_FORMAT", "human")
configure_logging(level=_log_level, format=_log_format)

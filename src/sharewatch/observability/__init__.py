"""
Observability for Sharewatch.

Provides structured logging for run lifecycle events.
"""

from sharewatch.observability.logging import (
    HumanReadableFormatter,
    SharewatchLogger,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "HumanReadableFormatter",
    "SharewatchLogger",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]

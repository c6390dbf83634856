"""
Sharewatch - public sharing alerts for Google Drive

Scans the Drive audit trail for items newly exposed to the internet,
re-checks each one against its current sharing state and sends every
owner a single consolidated alert.

Key Features:
- Read-only by design: never changes sharing settings
- Live re-verification: owners who already fixed their sharing are not alerted
- One email per owner per run, with per-recipient failure isolation

Quick Start:
    >>> from sharewatch import ExposurePipeline, load_config
    >>>
    >>> config = load_config("sharewatch.yaml")
    >>> pipeline = ExposurePipeline.from_config(config, dry_run=True)
    >>> result = pipeline.run()
    >>> print(f"Confirmed {len(result.confirmed)} exposures")
"""

from __future__ import annotations

__version__ = "0.1.0"

from sharewatch.config import ConfigLoader, MailConfig, MonitorConfig, WorkspaceConfig, load_config
from sharewatch.errors import (
    ConfigError,
    FetchError,
    NotificationError,
    ParseError,
    ResolutionError,
    SharewatchError,
)
from sharewatch.models import (
    AuditEvent,
    ConfirmedExposure,
    ExposureCandidate,
    ExposureLevel,
    OwnerNotificationBatch,
    Visibility,
    VisibilityChangeFact,
)
from sharewatch.pipeline import ExposurePipeline, RunResult, RunStage

__all__ = [
    "__version__",
    # Config
    "ConfigLoader",
    "MailConfig",
    "MonitorConfig",
    "WorkspaceConfig",
    "load_config",
    # Errors
    "ConfigError",
    "FetchError",
    "NotificationError",
    "ParseError",
    "ResolutionError",
    "SharewatchError",
    # Models
    "AuditEvent",
    "ConfirmedExposure",
    "ExposureCandidate",
    "ExposureLevel",
    "OwnerNotificationBatch",
    "Visibility",
    "VisibilityChangeFact",
    # Pipeline
    "ExposurePipeline",
    "RunResult",
    "RunStage",
]

"""
Data models for Sharewatch.

This package provides the core data structures used throughout Sharewatch:
- AuditEvent: Raw visibility-change audit record
- VisibilityChangeFact: Normalized projection of an audit event
- ExposureCandidate: Filtered, run-unique visibility change
- ConfirmedExposure: Exposure re-validated against live state
- OwnerNotificationBatch: Confirmed exposures grouped by owner
"""

from __future__ import annotations

from sharewatch.models.audit import (
    AuditEvent,
    AuditParameter,
    AuditSubEvent,
    Visibility,
    VisibilityChangeFact,
)
from sharewatch.models.exposure import (
    ConfirmedExposure,
    ExposureCandidate,
    ExposureLevel,
    ItemKind,
    OwnerNotificationBatch,
    ResolvedItem,
    SharingAccess,
    default_item_url,
)

__all__ = [
    # Audit
    "AuditEvent",
    "AuditParameter",
    "AuditSubEvent",
    "Visibility",
    "VisibilityChangeFact",
    # Exposure
    "ConfirmedExposure",
    "ExposureCandidate",
    "ExposureLevel",
    "ItemKind",
    "OwnerNotificationBatch",
    "ResolvedItem",
    "SharingAccess",
    "default_item_url",
]

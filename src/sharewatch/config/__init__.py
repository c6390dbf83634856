"""
Configuration for Sharewatch.

Provides the immutable monitor configuration and its loader.
"""

from __future__ import annotations

from sharewatch.config.monitor_config import (
    DRIVE_METADATA_SCOPE,
    GMAIL_SEND_SCOPE,
    MAX_PAGE_SIZE,
    REPORTS_AUDIT_SCOPE,
    ConfigLoader,
    MailConfig,
    MonitorConfig,
    WorkspaceConfig,
    load_config,
)

__all__ = [
    "DRIVE_METADATA_SCOPE",
    "GMAIL_SEND_SCOPE",
    "MAX_PAGE_SIZE",
    "REPORTS_AUDIT_SCOPE",
    "ConfigLoader",
    "MailConfig",
    "MonitorConfig",
    "WorkspaceConfig",
    "load_config",
]

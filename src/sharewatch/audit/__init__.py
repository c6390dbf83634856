"""
Audit trail retrieval and candidate extraction for Sharewatch.
"""

from sharewatch.audit.extractor import (
    CandidateExtractor,
    ExtractionStats,
    flatten_parameters,
    parse_event,
)
from sharewatch.audit.source import (
    APPLICATION_NAME,
    EVENT_NAME,
    AuditEventSource,
    AuditEventStream,
    AuditPageClient,
    ReportsAuditClient,
    format_window_start,
)

__all__ = [
    # Source
    "APPLICATION_NAME",
    "EVENT_NAME",
    "AuditEventSource",
    "AuditEventStream",
    "AuditPageClient",
    "ReportsAuditClient",
    "format_window_start",
    # Extractor
    "CandidateExtractor",
    "ExtractionStats",
    "flatten_parameters",
    "parse_event",
]

"""
Exposure detection pipeline for Sharewatch.

Runs one detection pass:
Idle -> Fetching -> Extracting -> Verifying -> Grouping -> Notifying -> Idle.
Stages after an empty result are skipped. A fetch failure notifies the
operations contact and ends the run before any owner is notified.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from sharewatch.audit import (
    AuditEventSource,
    CandidateExtractor,
    ExtractionStats,
    ReportsAuditClient,
    format_window_start,
)
from sharewatch.config import MonitorConfig
from sharewatch.errors import FetchError
from sharewatch.models import ConfirmedExposure, OwnerNotificationBatch
from sharewatch.notifications import (
    DispatchReport,
    NotificationDispatcher,
    OwnerGrouper,
    create_transport,
)
from sharewatch.observability import get_logger
from sharewatch.verification import DriveItemResolver, LiveStateVerifier
from sharewatch.workspace import WorkspaceClientFactory

logger = get_logger(__name__)


class RunStage(Enum):
    """Stages of a pipeline run."""

    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    VERIFYING = "verifying"
    GROUPING = "grouping"
    NOTIFYING = "notifying"


@dataclass
class RunResult:
    """
    Outcome of one pipeline run.

    Attributes:
        run_id: Unique run identifier
        window_start: Start of the audit window (RFC 3339)
        started_at: When the run started
        completed_at: When the run returned to idle
        last_stage: Last stage executed before returning to idle
        events_fetched: Audit events retrieved
        candidate_count: Candidates surviving extraction
        confirmed: Confirmed exposures in confirmation order
        batch: Exposures grouped by owner
        dispatch: Dispatch report, when notifications were sent
        extraction: Extraction counters
        fetch_error: Error message when the audit fetch failed
        operations_notified: Whether the operations contact was told of a failure
    """

    run_id: str
    window_start: str
    started_at: datetime
    completed_at: datetime | None = None
    last_stage: RunStage = RunStage.IDLE
    events_fetched: int = 0
    candidate_count: int = 0
    confirmed: list[ConfirmedExposure] = field(default_factory=list)
    batch: OwnerNotificationBatch = field(default_factory=OwnerNotificationBatch)
    dispatch: DispatchReport | None = None
    extraction: ExtractionStats = field(default_factory=ExtractionStats)
    fetch_error: str | None = None
    operations_notified: bool = False

    @property
    def failed(self) -> bool:
        """Check whether the run aborted on a fetch failure."""
        return self.fetch_error is not None

    @property
    def notifications_sent(self) -> int:
        """Number of owners notified."""
        return len(self.dispatch.sent) if self.dispatch else 0

    @property
    def notification_failures(self) -> dict[str, str]:
        """Per-owner notification failures."""
        return dict(self.dispatch.failures) if self.dispatch else {}

    @property
    def duration_seconds(self) -> float:
        """Run duration."""
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "window_start": self.window_start,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "last_stage": self.last_stage.value,
            "events_fetched": self.events_fetched,
            "candidates": self.candidate_count,
            "confirmed": [e.to_dict() for e in self.confirmed],
            "owners": self.batch.owners,
            "dispatch": self.dispatch.to_dict() if self.dispatch else None,
            "extraction": self.extraction.to_dict(),
            "fetch_error": self.fetch_error,
            "operations_notified": self.operations_notified,
            "duration_seconds": self.duration_seconds,
        }


class ExposurePipeline:
    """
    Sequential detection pipeline.

    Components are built once and reused across runs; every run starts
    with a fresh seen-ids set and keeps no memory of earlier runs.
    """

    def __init__(
        self,
        config: MonitorConfig,
        source: AuditEventSource,
        verifier: LiveStateVerifier,
        dispatcher: NotificationDispatcher,
        extractor: CandidateExtractor | None = None,
        grouper: OwnerGrouper | None = None,
    ) -> None:
        self._config = config
        self._source = source
        self._verifier = verifier
        self._dispatcher = dispatcher
        self._extractor = extractor or CandidateExtractor()
        self._grouper = grouper or OwnerGrouper()
        self._stage = RunStage.IDLE

    @property
    def config(self) -> MonitorConfig:
        """Get monitor configuration."""
        return self._config

    @property
    def stage(self) -> RunStage:
        """Current stage (IDLE between runs)."""
        return self._stage

    @property
    def dispatcher(self) -> NotificationDispatcher:
        """Get the notification dispatcher."""
        return self._dispatcher

    def _enter(self, stage: RunStage, result: RunResult) -> None:
        self._stage = stage
        result.last_stage = stage
        logger.debug(f"Entering stage {stage.value}", run_id=result.run_id)

    def _finish(self, result: RunResult) -> RunResult:
        self._stage = RunStage.IDLE
        result.completed_at = datetime.now(timezone.utc)
        if not result.failed:
            logger.run_completed(
                run_id=result.run_id,
                stage=result.last_stage.value,
                events=result.events_fetched,
                candidates=result.candidate_count,
                confirmed=len(result.confirmed),
                notified=result.notifications_sent,
                duration_seconds=result.duration_seconds,
            )
        return result

    def window_start(self, now: datetime | None = None) -> datetime:
        """Start of the lookback window ending at now."""
        now = now or datetime.now(timezone.utc)
        return now - timedelta(hours=self._config.lookback_window_hours)

    def run(self, now: datetime | None = None) -> RunResult:
        """
        Execute one detection run.

        Args:
            now: End of the lookback window (defaults to current time)

        Returns:
            RunResult describing what happened
        """
        window_start = format_window_start(self.window_start(now))
        result = RunResult(
            run_id=str(uuid.uuid4())[:8],
            window_start=window_start,
            started_at=datetime.now(timezone.utc),
        )
        logger.run_started(run_id=result.run_id, window_start=window_start)

        self._enter(RunStage.FETCHING, result)
        try:
            events = self._source.fetch(window_start)
        except FetchError as e:
            result.fetch_error = str(e)
            logger.run_failed(run_id=result.run_id, error=str(e))
            result.operations_notified = self._dispatcher.notify_operations(
                e, run_id=result.run_id
            )
            return self._finish(result)

        result.events_fetched = len(events)
        if not events:
            return self._finish(result)

        self._enter(RunStage.EXTRACTING, result)
        candidates = self._extractor.extract(
            events, self._config.excluded_document_ids, seen=set()
        )
        result.extraction = self._extractor.stats
        result.candidate_count = len(candidates)
        if not candidates:
            return self._finish(result)

        self._enter(RunStage.VERIFYING, result)
        result.confirmed = self._verifier.confirm_all(candidates)
        for exposure in result.confirmed:
            logger.exposure_confirmed(
                document_id=exposure.document_id,
                owner_email=exposure.owner_email,
                exposure_level=exposure.exposure_level.value,
            )
        if not result.confirmed:
            return self._finish(result)

        self._enter(RunStage.GROUPING, result)
        result.batch = self._grouper.group(result.confirmed)

        self._enter(RunStage.NOTIFYING, result)
        result.dispatch = self._dispatcher.dispatch(result.batch)

        return self._finish(result)

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        dry_run: bool = False,
        clients: WorkspaceClientFactory | None = None,
    ) -> ExposurePipeline:
        """
        Wire a pipeline against Google Workspace.

        Args:
            config: Monitor configuration
            dry_run: Record notifications instead of sending them
            clients: Client factory (built from config.workspace if omitted)

        Returns:
            Ready-to-run pipeline
        """
        clients = clients or WorkspaceClientFactory(config.workspace)

        source = AuditEventSource(
            ReportsAuditClient(clients.reports(), customer_id=config.workspace.customer_id),
            page_size=config.page_size,
        )

        # Items are read as their owner; workers each need their own clients
        if config.verification_workers > 1:
            resolver = DriveItemResolver(
                service_factory=lambda subject: WorkspaceClientFactory(
                    config.workspace
                ).drive(subject=subject)
            )
        else:
            resolver = DriveItemResolver(service_factory=clients.drive)
        verifier = LiveStateVerifier(resolver, max_workers=config.verification_workers)

        gmail_service = None
        if config.mail.transport == "gmail" and not dry_run:
            gmail_service = clients.gmail(sender=config.mail.from_address)
        transport = create_transport(config.mail, gmail_service=gmail_service, dry_run=dry_run)
        dispatcher = NotificationDispatcher(config, transport)

        return cls(config, source, verifier, dispatcher)

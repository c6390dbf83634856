"""
Candidate extraction for Sharewatch.

Turns raw audit events into exposure candidates in a single pass:
parse, keep public visibilities, drop shared-drive owners, excluded ids
and ids already seen during the run. Never calls a live service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from sharewatch.errors import ParseError
from sharewatch.models import (
    AuditEvent,
    ExposureCandidate,
    Visibility,
    VisibilityChangeFact,
)

logger = logging.getLogger(__name__)

REQUIRED_PARAMETERS = ("visibility", "owner", "doc_id")


@dataclass
class ExtractionStats:
    """
    Counters for one extraction pass.

    Attributes:
        events: Events examined
        parse_errors: Events skipped as malformed or incomplete
        not_public: Events with a non-public visibility
        shared_drive: Events owned by a shared drive
        duplicates: Events for an id already seen this run
        excluded: Events for an id in the exclusion list
        emitted: Candidates produced
    """

    events: int = 0
    parse_errors: int = 0
    not_public: int = 0
    shared_drive: int = 0
    duplicates: int = 0
    excluded: int = 0
    emitted: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "events": self.events,
            "parse_errors": self.parse_errors,
            "not_public": self.not_public,
            "shared_drive": self.shared_drive,
            "duplicates": self.duplicates,
            "excluded": self.excluded,
            "emitted": self.emitted,
        }


def flatten_parameters(event: AuditEvent) -> dict[str, Any]:
    """
    Flatten the first sub-event's parameters into a lookup by name.

    Parameters without a generic value fall back to their boolean value,
    then their multi-value list.
    """
    lookup: dict[str, Any] = {}
    for parameter in event.parameters:
        lookup[parameter.name] = parameter.resolved_value
    return lookup


def parse_event(event: AuditEvent) -> VisibilityChangeFact:
    """
    Parse an audit event into a VisibilityChangeFact.

    Args:
        event: Raw audit event

    Returns:
        Normalized fact

    Raises:
        ParseError: If visibility, owner or doc_id is missing
    """
    params = flatten_parameters(event)
    missing = [name for name in REQUIRED_PARAMETERS if not params.get(name)]
    if missing:
        raise ParseError(
            f"Audit event missing parameters: {', '.join(missing)}", missing=missing
        )

    return VisibilityChangeFact(
        document_id=str(params["doc_id"]),
        document_title=str(params.get("doc_title") or ""),
        owner_email=str(params["owner"]),
        visibility=Visibility.from_string(str(params["visibility"])),
        owner_is_shared_drive=_is_true(params.get("owner_is_shared_drive")),
    )


class CandidateExtractor:
    """
    Extracts exposure candidates from audit events.

    The seen-ids set is passed explicitly so a caller can share it across
    several extract() calls belonging to the same run.
    """

    def __init__(self) -> None:
        self.stats = ExtractionStats()

    def extract(
        self,
        events: Iterable[AuditEvent],
        exclusion_set: frozenset[str] | set[str] = frozenset(),
        seen: set[str] | None = None,
    ) -> list[ExposureCandidate]:
        """
        Extract candidates from events, first-seen wins.

        Args:
            events: Audit events in service order
            exclusion_set: Document ids exempt from alerting
            seen: Run-scoped seen ids, updated in place

        Returns:
            Candidates in event order, unique by document id
        """
        if seen is None:
            seen = set()
        stats = ExtractionStats()
        candidates: list[ExposureCandidate] = []

        for event in events:
            stats.events += 1
            try:
                fact = parse_event(event)
            except ParseError as e:
                stats.parse_errors += 1
                logger.debug(f"Skipping audit event: {e}")
                continue

            if not fact.visibility.is_public:
                stats.not_public += 1
                continue

            if fact.owner_is_shared_drive:
                stats.shared_drive += 1
                continue

            if fact.document_id in seen:
                stats.duplicates += 1
                continue

            if fact.document_id in exclusion_set:
                stats.excluded += 1
                continue

            seen.add(fact.document_id)
            candidates.append(
                ExposureCandidate(
                    document_id=fact.document_id,
                    document_title=fact.document_title,
                    owner_email=fact.owner_email,
                    visibility=fact.visibility,
                )
            )
            stats.emitted += 1

        self.stats = stats
        logger.info(
            f"Extracted {stats.emitted} candidate(s) from {stats.events} event(s) "
            f"({stats.parse_errors} malformed, {stats.shared_drive} shared drive, "
            f"{stats.duplicates} duplicate, {stats.excluded} excluded)"
        )
        return candidates


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False

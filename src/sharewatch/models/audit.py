"""
Audit event data model for Sharewatch.

This module defines the raw AuditEvent records returned by the Admin SDK
Reports API and the normalized VisibilityChangeFact projection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Visibility(Enum):
    """Visibility value reported by a change_document_visibility event."""

    PUBLIC_ON_WEB = "public_on_the_web"
    ANYONE_WITH_LINK = "anyone_with_link"
    PEOPLE_WITH_LINK = "people_with_link"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: str) -> Visibility:
        """
        Create Visibility from a raw audit value.

        Unknown values map to OTHER instead of raising.

        Args:
            value: Raw visibility string (case-insensitive)

        Returns:
            Matching Visibility enum value
        """
        value_lower = value.strip().lower()
        for visibility in cls:
            if visibility.value == value_lower:
                return visibility
        return cls.OTHER

    @property
    def is_public(self) -> bool:
        """Check whether this visibility exposes the item outside the domain."""
        return self is not Visibility.OTHER


@dataclass
class AuditParameter:
    """
    A single (name, value) parameter of an audit sub-event.

    Attributes:
        name: Parameter name (doc_id, owner, visibility, ...)
        value: Generic string value
        bool_value: Boolean value for boolean-typed parameters
        multi_value: Values for multi-valued parameters
    """

    name: str
    value: str | None = None
    bool_value: bool | None = None
    multi_value: list[str] | None = None

    @property
    def resolved_value(self) -> Any:
        """Return the generic value, falling back to the typed fields."""
        if self.value is not None:
            return self.value
        if self.bool_value is not None:
            return self.bool_value
        return self.multi_value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditParameter:
        """Create from a Reports API parameter dictionary."""
        return cls(
            name=data.get("name", ""),
            value=data.get("value"),
            bool_value=data.get("boolValue"),
            multi_value=data.get("multiValue"),
        )


@dataclass
class AuditSubEvent:
    """One entry of an activity's events list."""

    name: str
    type: str = ""
    parameters: list[AuditParameter] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditSubEvent:
        """Create from a Reports API event dictionary."""
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            parameters=[
                AuditParameter.from_dict(p) for p in data.get("parameters", [])
            ],
        )


@dataclass
class AuditEvent:
    """
    Raw visibility-change audit record.

    Opaque until parsed by the candidate extractor.

    Attributes:
        name: Event name (change_document_visibility)
        timestamp: When the audit service recorded the activity
        sub_events: Sub-events in service order; the first one is parsed
        actor_email: Who performed the change, when reported
    """

    name: str
    timestamp: datetime | None = None
    sub_events: list[AuditSubEvent] = field(default_factory=list)
    actor_email: str = ""

    @property
    def parameters(self) -> list[AuditParameter]:
        """Parameters of the first sub-event."""
        if not self.sub_events:
            return []
        return self.sub_events[0].parameters

    @classmethod
    def from_activity(cls, activity: dict[str, Any]) -> AuditEvent:
        """
        Create from a Reports API activity resource.

        Args:
            activity: Activity dictionary as returned by activities.list

        Returns:
            AuditEvent instance
        """
        sub_events = [AuditSubEvent.from_dict(e) for e in activity.get("events", [])]

        timestamp = None
        raw_time = activity.get("id", {}).get("time")
        if raw_time:
            try:
                timestamp = datetime.fromisoformat(raw_time.replace("Z", "+00:00"))
            except (ValueError, TypeError):
                pass

        return cls(
            name=sub_events[0].name if sub_events else "",
            timestamp=timestamp,
            sub_events=sub_events,
            actor_email=activity.get("actor", {}).get("email", ""),
        )


@dataclass(frozen=True)
class VisibilityChangeFact:
    """
    Normalized projection of one AuditEvent.

    Attributes:
        document_id: Drive item identifier
        document_title: Item title at event time
        owner_email: Owner of the item
        visibility: New visibility reported by the event
        owner_is_shared_drive: Whether the owner is a shared drive identity
    """

    document_id: str
    document_title: str
    owner_email: str
    visibility: Visibility
    owner_is_shared_drive: bool = False

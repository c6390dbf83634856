"""
Exposure data model for Sharewatch.

Defines exposure candidates, live resolution results, confirmed exposures
and the per-owner notification batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from sharewatch.models.audit import Visibility

DRIVE_OPEN_URL = "https://drive.google.com/open?id={item_id}"


class SharingAccess(Enum):
    """Current sharing access of a Drive item."""

    ANYONE = "anyone"
    ANYONE_WITH_LINK = "anyone_with_link"
    DOMAIN = "domain"
    DOMAIN_WITH_LINK = "domain_with_link"
    PRIVATE = "private"


class ExposureLevel(Enum):
    """Exposure level of an item after live verification."""

    ANYONE_ON_WEB = "anyone_on_web"
    ANYONE_WITH_LINK = "anyone_with_link"
    RESTRICTED = "restricted"

    @classmethod
    def from_sharing_access(cls, access: SharingAccess) -> ExposureLevel:
        """Classify a sharing access value."""
        if access is SharingAccess.ANYONE:
            return cls.ANYONE_ON_WEB
        if access is SharingAccess.ANYONE_WITH_LINK:
            return cls.ANYONE_WITH_LINK
        return cls.RESTRICTED

    @property
    def is_public(self) -> bool:
        """Check whether the level still exposes the item publicly."""
        return self is not ExposureLevel.RESTRICTED

    @property
    def label(self) -> str:
        """Human-readable label shown to owners."""
        return _EXPOSURE_LABELS[self]


_EXPOSURE_LABELS = {
    ExposureLevel.ANYONE_ON_WEB: "Public sur le Web (Indexable)",
    ExposureLevel.ANYONE_WITH_LINK: "Tous les utilisateurs avec le lien",
    ExposureLevel.RESTRICTED: "Restreint",
}


class ItemKind(Enum):
    """Tag of a Drive item resolution."""

    FILE = "file"
    FOLDER = "folder"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ExposureCandidate:
    """
    A visibility change that passed coarse filtering.

    Unique by document_id within one run.
    """

    document_id: str
    document_title: str
    owner_email: str
    visibility: Visibility = Visibility.OTHER


@dataclass(frozen=True)
class ResolvedItem:
    """
    Tagged result of resolving a Drive item identifier.

    Attributes:
        kind: FILE, FOLDER or NOT_FOUND
        item_id: Identifier that was resolved
        title: Current item title
        url: Canonical item URL
        sharing_access: Current sharing access (None when not found)
        mime_type: Item MIME type
    """

    kind: ItemKind
    item_id: str
    title: str = ""
    url: str = ""
    sharing_access: SharingAccess | None = None
    mime_type: str = ""

    @property
    def found(self) -> bool:
        """Check whether the item exists and is readable."""
        return self.kind is not ItemKind.NOT_FOUND

    @classmethod
    def not_found(cls, item_id: str) -> ResolvedItem:
        """Build a NOT_FOUND result."""
        return cls(kind=ItemKind.NOT_FOUND, item_id=item_id)


@dataclass(frozen=True)
class ConfirmedExposure:
    """
    An exposure re-confirmed against the item's current state.

    Attributes:
        document_id: Drive item identifier
        title: Item title
        owner_email: Owner to notify
        url: Canonical item URL
        exposure_level: ANYONE_ON_WEB or ANYONE_WITH_LINK
        item_kind: Whether the item is a file or a folder
    """

    document_id: str
    title: str
    owner_email: str
    url: str
    exposure_level: ExposureLevel
    item_kind: ItemKind = ItemKind.FILE

    def __post_init__(self) -> None:
        if not self.exposure_level.is_public:
            raise ValueError(
                f"Confirmed exposure for {self.document_id} must be public, "
                f"got {self.exposure_level.value}"
            )

    @property
    def exposure_label(self) -> str:
        """Human-readable exposure label."""
        return self.exposure_level.label

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "document_id": self.document_id,
            "title": self.title,
            "owner_email": self.owner_email,
            "url": self.url,
            "exposure_level": self.exposure_level.value,
            "exposure_label": self.exposure_label,
            "item_kind": self.item_kind.value,
        }


@dataclass
class OwnerNotificationBatch:
    """
    Confirmed exposures grouped by owner email.

    Owners keep the order of their first exposure and each owner's list
    keeps confirmation order.
    """

    entries: dict[str, list[ConfirmedExposure]] = field(default_factory=dict)

    def add(self, exposure: ConfirmedExposure) -> None:
        """Append an exposure to its owner's list."""
        self.entries.setdefault(exposure.owner_email, []).append(exposure)

    @property
    def owners(self) -> list[str]:
        """Owner emails in encounter order."""
        return list(self.entries)

    @property
    def total_exposures(self) -> int:
        """Total number of exposures across owners."""
        return sum(len(items) for items in self.entries.values())

    def items(self) -> Iterator[tuple[str, list[ConfirmedExposure]]]:
        """Iterate (owner, exposures) pairs."""
        return iter(self.entries.items())

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, owner_email: object) -> bool:
        return owner_email in self.entries

    def __getitem__(self, owner_email: str) -> list[ConfirmedExposure]:
        return self.entries[owner_email]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            owner: [e.to_dict() for e in exposures]
            for owner, exposures in self.entries.items()
        }


def default_item_url(item_id: str) -> str:
    """Build the fallback Drive URL for an item."""
    return DRIVE_OPEN_URL.format(item_id=item_id)

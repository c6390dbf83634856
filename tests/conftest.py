"""
Pytest configuration and fixtures for Sharewatch tests.

This module provides common fixtures used across unit tests: audit
activity builders, canned audit page clients, fake item resolvers and
recording mail transports.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from sharewatch.audit import AuditPageClient
from sharewatch.config import MailConfig, MonitorConfig
from sharewatch.errors import NotificationError
from sharewatch.models import (
    AuditEvent,
    ExposureCandidate,
    ItemKind,
    ResolvedItem,
    SharingAccess,
    Visibility,
)
from sharewatch.notifications import DryRunTransport, MailTransport, OutgoingMessage
from sharewatch.verification import ItemResolver


class CannedAuditClient(AuditPageClient):
    """Audit client replaying a fixed list of pages."""

    def __init__(self, pages: list[list[dict[str, Any]]], fail_on_page: int | None = None):
        self.pages = pages
        self.fail_on_page = fail_on_page
        self.calls: list[dict[str, Any]] = []

    def list_page(self, start_time: str, page_token: str | None, page_size: int) -> dict[str, Any]:
        self.calls.append(
            {"start_time": start_time, "page_token": page_token, "page_size": page_size}
        )
        index = 0 if page_token is None else int(page_token)
        if self.fail_on_page is not None and index + 1 == self.fail_on_page:
            raise ConnectionError("audit service unavailable")

        response: dict[str, Any] = {"items": self.pages[index]} if self.pages else {}
        if index + 1 < len(self.pages):
            response["nextPageToken"] = str(index + 1)
        return response


class FakeResolver(ItemResolver):
    """Resolver answering from an in-memory table."""

    def __init__(self, items: dict[str, ResolvedItem]):
        self.items = items
        self.resolved: list[str] = []
        self.owners: list[str | None] = []

    def resolve(self, item_id: str, owner_email: str | None = None) -> ResolvedItem:
        self.resolved.append(item_id)
        self.owners.append(owner_email)
        return self.items.get(item_id, ResolvedItem.not_found(item_id))


class FailingTransport(MailTransport):
    """Transport failing for selected recipients and recording the rest."""

    name = "failing"

    def __init__(self, fail_for: set[str]):
        self.fail_for = fail_for
        self.sent: list[OutgoingMessage] = []
        self.attempts: list[str] = []

    def send(self, message: OutgoingMessage) -> None:
        self.attempts.append(message.to)
        if message.to in self.fail_for:
            raise NotificationError(f"mailbox unavailable: {message.to}", recipient=message.to)
        self.sent.append(message)


# Builders


@pytest.fixture
def make_activity() -> Callable[..., dict[str, Any]]:
    """Return a builder for Reports API change_document_visibility activities."""

    def _make(
        doc_id: str | None = "d1",
        owner: str | None = "a@x.com",
        visibility: str | None = "anyone_with_link",
        owner_is_shared_drive: bool | None = None,
        doc_title: str | None = None,
        time: str = "2024-05-02T10:15:00.000Z",
    ) -> dict[str, Any]:
        parameters: list[dict[str, Any]] = []
        if doc_id is not None:
            parameters.append({"name": "doc_id", "value": doc_id})
        if doc_title is not None:
            parameters.append({"name": "doc_title", "value": doc_title})
        if owner is not None:
            parameters.append({"name": "owner", "value": owner})
        if visibility is not None:
            parameters.append({"name": "visibility", "value": visibility})
        if owner_is_shared_drive is not None:
            parameters.append({"name": "owner_is_shared_drive", "boolValue": owner_is_shared_drive})

        return {
            "kind": "admin#reports#activity",
            "id": {"time": time, "applicationName": "drive"},
            "actor": {"email": owner or ""},
            "events": [
                {
                    "type": "acl_change",
                    "name": "change_document_visibility",
                    "parameters": parameters,
                }
            ],
        }

    return _make


@pytest.fixture
def make_event(make_activity) -> Callable[..., AuditEvent]:
    """Return a builder for parsed AuditEvent objects."""

    def _make(**kwargs: Any) -> AuditEvent:
        return AuditEvent.from_activity(make_activity(**kwargs))

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., ExposureCandidate]:
    """Return a builder for exposure candidates."""

    def _make(
        document_id: str = "d1",
        owner_email: str = "a@x.com",
        document_title: str = "Budget 2024",
        visibility: Visibility = Visibility.ANYONE_WITH_LINK,
    ) -> ExposureCandidate:
        return ExposureCandidate(
            document_id=document_id,
            document_title=document_title,
            owner_email=owner_email,
            visibility=visibility,
        )

    return _make


@pytest.fixture
def make_item() -> Callable[..., ResolvedItem]:
    """Return a builder for resolved Drive items."""

    def _make(
        item_id: str = "d1",
        access: SharingAccess = SharingAccess.ANYONE_WITH_LINK,
        kind: ItemKind = ItemKind.FILE,
        title: str = "Budget 2024",
    ) -> ResolvedItem:
        return ResolvedItem(
            kind=kind,
            item_id=item_id,
            title=title,
            url=f"https://docs.google.com/document/d/{item_id}/edit",
            sharing_access=access,
        )

    return _make


# Collaborators


@pytest.fixture
def canned_audit_client() -> Callable[..., CannedAuditClient]:
    """Return a factory for audit clients replaying canned pages."""
    return CannedAuditClient


@pytest.fixture
def fake_resolver() -> Callable[..., FakeResolver]:
    """Return a factory for in-memory resolvers."""
    return FakeResolver


@pytest.fixture
def failing_transport() -> Callable[..., FailingTransport]:
    """Return a factory for transports failing for some recipients."""
    return FailingTransport


@pytest.fixture
def dry_run_transport() -> DryRunTransport:
    """Return a recording transport."""
    return DryRunTransport()


@pytest.fixture
def monitor_config() -> MonitorConfig:
    """Return a monitor configuration for tests."""
    return MonitorConfig(
        assistance_email="assistance@x.com",
        sender_display_name="Sécurité Drive",
        lookback_window_hours=24,
        mail=MailConfig(from_address="securite@x.com"),
    )

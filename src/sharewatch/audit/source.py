"""
Audit event source for Sharewatch.

Retrieves change_document_visibility records from the Admin SDK Reports
API for a time window, one page at a time.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterator

from googleapiclient.errors import HttpError

from sharewatch.config import MAX_PAGE_SIZE
from sharewatch.errors import FetchError
from sharewatch.models import AuditEvent

logger = logging.getLogger(__name__)

APPLICATION_NAME = "drive"
EVENT_NAME = "change_document_visibility"


class AuditPageClient(ABC):
    """
    Abstract audit query client.

    Implementations return one raw page per call:
    {"items": [activity, ...], "nextPageToken": "..."}.
    """

    @abstractmethod
    def list_page(
        self,
        start_time: str,
        page_token: str | None,
        page_size: int,
    ) -> dict[str, Any]:
        """
        Fetch one page of visibility-change activities.

        Args:
            start_time: RFC 3339 window start
            page_token: Continuation token (None for the first page)
            page_size: Maximum number of records in the page

        Returns:
            Raw page dictionary
        """
        ...


class ReportsAuditClient(AuditPageClient):
    """Audit query client backed by the Admin SDK Reports API."""

    def __init__(self, service: Any, customer_id: str | None = None) -> None:
        """
        Initialize the client.

        Args:
            service: Reports API service (admin reports_v1)
            customer_id: Optional Workspace customer id
        """
        self._service = service
        self._customer_id = customer_id

    def list_page(
        self,
        start_time: str,
        page_token: str | None,
        page_size: int,
    ) -> dict[str, Any]:
        """Fetch one page from activities.list."""
        params: dict[str, Any] = {
            "userKey": "all",
            "applicationName": APPLICATION_NAME,
            "eventName": EVENT_NAME,
            "startTime": start_time,
            "maxResults": page_size,
        }
        if page_token:
            params["pageToken"] = page_token
        if self._customer_id:
            params["customerId"] = self._customer_id

        return self._service.activities().list(**params).execute()


class AuditEventStream:
    """
    Restartable lazy sequence of audit events.

    Each iteration starts again from the first page, following
    continuation tokens until the service reports none remaining.
    """

    def __init__(
        self,
        client: AuditPageClient,
        start_time: str,
        page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._client = client
        self._start_time = start_time
        self._page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        self.pages_fetched = 0

    @property
    def start_time(self) -> str:
        """Window start of the stream."""
        return self._start_time

    @property
    def page_size(self) -> int:
        """Effective page size."""
        return self._page_size

    def pages(self) -> Iterator[list[AuditEvent]]:
        """
        Yield audit events page by page.

        Raises:
            FetchError: If any page request fails
        """
        self.pages_fetched = 0
        page_token: str | None = None

        while True:
            page_number = self.pages_fetched + 1
            try:
                response = self._client.list_page(
                    self._start_time, page_token, self._page_size
                )
            except HttpError as e:
                raise FetchError(
                    f"Audit query failed on page {page_number}: {e}",
                    page_number=page_number,
                    status_code=e.resp.status,
                ) from e
            except Exception as e:
                raise FetchError(
                    f"Audit query failed on page {page_number}: "
                    f"{type(e).__name__}: {e}",
                    page_number=page_number,
                ) from e

            self.pages_fetched = page_number
            yield [AuditEvent.from_activity(item) for item in response.get("items", [])]

            page_token = response.get("nextPageToken")
            if not page_token:
                break

    def __iter__(self) -> Iterator[AuditEvent]:
        for page in self.pages():
            yield from page


class AuditEventSource:
    """
    Retrieves visibility-change audit events for a window.

    fetch() either returns every event of the window in service order or
    raises FetchError; partial results are never returned.
    """

    def __init__(self, client: AuditPageClient, page_size: int = MAX_PAGE_SIZE) -> None:
        """
        Initialize the source.

        Args:
            client: Audit query client
            page_size: Requested page size (clamped to 1..500)
        """
        self._client = client
        self._page_size = page_size

    def stream(self, window_start: datetime | str) -> AuditEventStream:
        """Build a lazy event stream for the window."""
        return AuditEventStream(
            self._client, format_window_start(window_start), self._page_size
        )

    def fetch(self, window_start: datetime | str) -> list[AuditEvent]:
        """
        Fetch all audit events since window_start.

        Args:
            window_start: Window start as datetime or ISO-8601 string

        Returns:
            Events in the order returned by the audit service

        Raises:
            FetchError: If any request fails
        """
        stream = self.stream(window_start)
        events = list(stream)
        logger.info(
            f"Fetched {len(events)} audit events in {stream.pages_fetched} page(s) "
            f"since {stream.start_time}"
        )
        return events


def format_window_start(window_start: datetime | str) -> str:
    """
    Format a window start for the audit query.

    Datetimes are converted to UTC RFC 3339 with a Z suffix; naive
    datetimes are taken as UTC. Strings are passed through.
    """
    if isinstance(window_start, str):
        return window_start
    if window_start.tzinfo is None:
        window_start = window_start.replace(tzinfo=timezone.utc)
    utc = window_start.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")

"""
Drive item resolution for Sharewatch.

Resolves an identifier whose type is unknown in advance into a tagged
result (file, folder or not found) carrying the item's current sharing
access, using the Drive API v3.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

from googleapiclient.errors import HttpError

from sharewatch.errors import ResolutionError
from sharewatch.models import ItemKind, ResolvedItem, SharingAccess, default_item_url

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

PERMISSION_FIELDS = "type, role, allowFileDiscovery, domain"
ITEM_FIELDS = f"id, name, mimeType, webViewLink, permissions({PERMISSION_FIELDS})"

# Statuses meaning the item is gone or not readable by the caller
MISSING_STATUSES = {400, 403, 404}


def classify_permissions(permissions: list[dict[str, Any]]) -> SharingAccess:
    """
    Derive the sharing access of an item from its permissions.

    The widest grant wins: anyone beats domain beats private.

    Args:
        permissions: Drive permission resources

    Returns:
        SharingAccess value
    """
    anyone = [p for p in permissions if p.get("type") == "anyone"]
    if anyone:
        if any(p.get("allowFileDiscovery") for p in anyone):
            return SharingAccess.ANYONE
        return SharingAccess.ANYONE_WITH_LINK

    domain = [p for p in permissions if p.get("type") == "domain"]
    if domain:
        if any(p.get("allowFileDiscovery") for p in domain):
            return SharingAccess.DOMAIN
        return SharingAccess.DOMAIN_WITH_LINK

    return SharingAccess.PRIVATE


class ItemResolver(ABC):
    """Abstract resolver from item id to a tagged ResolvedItem."""

    @abstractmethod
    def resolve(self, item_id: str, owner_email: str | None = None) -> ResolvedItem:
        """
        Resolve an item id.

        Args:
            item_id: Drive item identifier
            owner_email: Owner reported by the audit trail, used as the
                identity reading the item when the resolver supports it

        Returns:
            ResolvedItem tagged FILE, FOLDER or NOT_FOUND

        Raises:
            ResolutionError: If item_id is blank
        """
        ...


class DriveItemResolver(ItemResolver):
    """
    Resolver backed by the Drive API v3.

    Drive returns an item's permissions only to users who can share it, so
    with a service factory each item is read as its owner. The factory is
    called with the subject to impersonate and its services are cached per
    thread and subject, since API clients are not thread-safe. A ready
    service is used as-is for every item.
    """

    def __init__(
        self,
        service: Any = None,
        service_factory: Callable[[str | None], Any] | None = None,
    ) -> None:
        if service is None and service_factory is None:
            raise ValueError("Either service or service_factory must be provided")
        self._service = service
        self._service_factory = service_factory
        self._local = threading.local()

    def _get_service(self, subject: str | None) -> Any:
        if self._service_factory is None:
            return self._service
        services = getattr(self._local, "services", None)
        if services is None:
            services = self._local.services = {}
        if subject not in services:
            services[subject] = self._service_factory(subject)
        return services[subject]

    def resolve(self, item_id: str, owner_email: str | None = None) -> ResolvedItem:
        """Resolve an item as its owner and read its current sharing access."""
        if not item_id or not item_id.strip():
            raise ResolutionError("Cannot resolve a blank item id", item_id=item_id)

        try:
            service = self._get_service(owner_email)

            item = service.files().get(
                fileId=item_id,
                fields=ITEM_FIELDS,
                supportsAllDrives=True,
            ).execute()

            permissions = item.get("permissions")
            if permissions is None:
                permissions = self._list_permissions(service, item_id)

        except HttpError as e:
            status = e.resp.status
            if status in MISSING_STATUSES:
                logger.debug(f"Item {item_id} not found or inaccessible (HTTP {status})")
            else:
                logger.warning(f"Drive API error resolving item {item_id}: {e}")
            return ResolvedItem.not_found(item_id)
        except Exception as e:
            logger.warning(f"Error resolving item {item_id}: {type(e).__name__}: {e}")
            return ResolvedItem.not_found(item_id)

        mime_type = item.get("mimeType", "")
        kind = ItemKind.FOLDER if mime_type == FOLDER_MIME_TYPE else ItemKind.FILE

        return ResolvedItem(
            kind=kind,
            item_id=item.get("id", item_id),
            title=item.get("name", ""),
            url=item.get("webViewLink") or default_item_url(item_id),
            sharing_access=classify_permissions(permissions),
            mime_type=mime_type,
        )

    def _list_permissions(self, service: Any, item_id: str) -> list[dict[str, Any]]:
        """List all permissions of an item."""
        permissions: list[dict[str, Any]] = []
        page_token = None

        while True:
            response = service.permissions().list(
                fileId=item_id,
                pageSize=100,
                pageToken=page_token,
                fields=f"nextPageToken, permissions({PERMISSION_FIELDS})",
                supportsAllDrives=True,
            ).execute()

            permissions.extend(response.get("permissions", []))

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        return permissions

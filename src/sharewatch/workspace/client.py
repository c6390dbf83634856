"""
Google Workspace API clients for Sharewatch.

Builds the Admin SDK Reports, Drive and Gmail services from service
account credentials with domain-wide delegation.
"""

from __future__ import annotations

import logging
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build

from sharewatch.config import WorkspaceConfig
from sharewatch.errors import ConfigError

logger = logging.getLogger(__name__)


class WorkspaceClientFactory:
    """
    Creates authenticated Google API services.

    Services are built lazily and cached per (api, version, subject) so a
    run reuses one HTTP client per API.
    """

    def __init__(self, config: WorkspaceConfig) -> None:
        """
        Initialize the factory.

        Args:
            config: Workspace connection settings

        Raises:
            ConfigError: If no service account credentials are configured
        """
        if not config.has_credentials:
            raise ConfigError(
                "Either workspace.service_account_file or "
                "workspace.service_account_info must be provided"
            )
        self._config = config
        self._credentials: Any = None
        self._services: dict[tuple[str, str, str | None], Any] = {}

    @property
    def config(self) -> WorkspaceConfig:
        """Get workspace configuration."""
        return self._config

    def _get_credentials(self) -> Any:
        """
        Get service account credentials from config.

        Raises:
            ConfigError: If the key file is unreadable or the key is malformed
        """
        if self._credentials is None:
            try:
                if self._config.service_account_file:
                    self._credentials = service_account.Credentials.from_service_account_file(
                        self._config.service_account_file,
                        scopes=list(self._config.scopes),
                    )
                else:
                    self._credentials = service_account.Credentials.from_service_account_info(
                        self._config.service_account_info,
                        scopes=list(self._config.scopes),
                    )
            except (OSError, ValueError) as e:
                raise ConfigError(f"Cannot load service account credentials: {e}") from e
        return self._credentials

    def service(self, api: str, version: str, subject: str | None = None) -> Any:
        """
        Get or create an API service.

        Args:
            api: API name (admin, drive, gmail)
            version: API version
            subject: User to impersonate (defaults to the delegated admin)

        Returns:
            googleapiclient Resource
        """
        subject = subject or self._config.delegated_user
        key = (api, version, subject)
        if key not in self._services:
            credentials = self._get_credentials()
            if subject:
                credentials = credentials.with_subject(subject)
            logger.debug(f"Building {api} {version} service for {subject or 'service account'}")
            self._services[key] = build(
                api, version, credentials=credentials, cache_discovery=False
            )
        return self._services[key]

    def reports(self) -> Any:
        """Admin SDK Reports API service."""
        return self.service("admin", "reports_v1")

    def drive(self, subject: str | None = None) -> Any:
        """Drive API v3 service acting as subject (the delegated admin by default)."""
        return self.service("drive", "v3", subject=subject)

    def gmail(self, sender: str | None = None) -> Any:
        """Gmail API service impersonating the sender mailbox."""
        return self.service("gmail", "v1", subject=sender)

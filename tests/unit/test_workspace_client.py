"""
Tests for Google Workspace client construction.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from sharewatch.config import WorkspaceConfig
from sharewatch.errors import ConfigError
from sharewatch.workspace import WorkspaceClientFactory


class TestWorkspaceClientFactory:
    """Tests for WorkspaceClientFactory."""

    def test_requires_credentials(self):
        """Test that a config without credentials is rejected."""
        with pytest.raises(ConfigError):
            WorkspaceClientFactory(WorkspaceConfig())

    @patch("sharewatch.workspace.client.build")
    @patch("sharewatch.workspace.client.service_account")
    def test_reports_service_delegated(self, mock_sa, mock_build):
        """Test that services impersonate the delegated administrator."""
        credentials = MagicMock()
        mock_sa.Credentials.from_service_account_file.return_value = credentials
        config = WorkspaceConfig(
            service_account_file="/tmp/sa.json", delegated_user="admin@x.com"
        )

        factory = WorkspaceClientFactory(config)
        factory.reports()

        mock_sa.Credentials.from_service_account_file.assert_called_once()
        credentials.with_subject.assert_called_once_with("admin@x.com")
        args = mock_build.call_args
        assert args.args == ("admin", "reports_v1")
        assert args.kwargs["credentials"] is credentials.with_subject.return_value
        assert args.kwargs["cache_discovery"] is False

    @patch("sharewatch.workspace.client.build")
    @patch("sharewatch.workspace.client.service_account")
    def test_services_are_cached(self, mock_sa, mock_build):
        """Test that repeated requests reuse the same service."""
        factory = WorkspaceClientFactory(WorkspaceConfig(service_account_info={"type": "service_account"}))

        assert factory.drive() is factory.drive()
        assert mock_build.call_count == 1
        mock_sa.Credentials.from_service_account_info.assert_called_once()

    @patch("sharewatch.workspace.client.build")
    @patch("sharewatch.workspace.client.service_account")
    def test_gmail_impersonates_sender(self, mock_sa, mock_build):
        """Test that the Gmail service acts as the sender mailbox."""
        credentials = mock_sa.Credentials.from_service_account_file.return_value
        factory = WorkspaceClientFactory(
            WorkspaceConfig(service_account_file="/tmp/sa.json", delegated_user="admin@x.com")
        )

        factory.gmail(sender="securite@x.com")

        credentials.with_subject.assert_called_once_with("securite@x.com")
        assert mock_build.call_args.args == ("gmail", "v1")

    @patch("sharewatch.workspace.client.build")
    @patch("sharewatch.workspace.client.service_account")
    def test_drive_impersonates_subject(self, mock_sa, mock_build):
        """Test that the Drive service can act as an item owner."""
        credentials = mock_sa.Credentials.from_service_account_file.return_value
        factory = WorkspaceClientFactory(
            WorkspaceConfig(service_account_file="/tmp/sa.json", delegated_user="admin@x.com")
        )

        factory.drive(subject="a@x.com")

        credentials.with_subject.assert_called_once_with("a@x.com")
        assert mock_build.call_args.args == ("drive", "v3")

    @patch("sharewatch.workspace.client.build")
    @patch("sharewatch.workspace.client.service_account")
    def test_missing_key_file_is_config_error(self, mock_sa, mock_build):
        """Test that an unreadable key file is reported as a configuration error."""
        mock_sa.Credentials.from_service_account_file.side_effect = FileNotFoundError(
            "/tmp/missing.json"
        )
        factory = WorkspaceClientFactory(WorkspaceConfig(service_account_file="/tmp/missing.json"))

        with pytest.raises(ConfigError, match="Cannot load service account credentials"):
            factory.reports()
        mock_build.assert_not_called()

    @patch("sharewatch.workspace.client.service_account")
    def test_malformed_key_is_config_error(self, mock_sa):
        """Test that malformed inline key material is a configuration error."""
        mock_sa.Credentials.from_service_account_info.side_effect = ValueError(
            "Service account info was not in the expected format"
        )
        factory = WorkspaceClientFactory(WorkspaceConfig(service_account_info={"type": "user"}))

        with pytest.raises(ConfigError):
            factory.drive()

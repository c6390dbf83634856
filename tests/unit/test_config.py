"""
Tests for monitor configuration.
"""

from __future__ import annotations

import dataclasses
import json

import pytest

from sharewatch.config import ConfigLoader, MailConfig, MonitorConfig, WorkspaceConfig, load_config
from sharewatch.errors import ConfigError


class TestMonitorConfig:
    """Tests for MonitorConfig."""

    def test_defaults(self):
        """Test default values."""
        config = MonitorConfig(assistance_email="ops@x.com")

        assert config.lookback_window_hours == 24
        assert config.page_size == 500
        assert config.verification_workers == 1
        assert config.excluded_document_ids == frozenset()
        assert config.mail.transport == "smtp"

    def test_is_frozen(self):
        """Test that configuration cannot be mutated."""
        config = MonitorConfig(assistance_email="ops@x.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.page_size = 10

    def test_excluded_ids_normalized(self):
        """Test that exclusions become a frozenset."""
        config = MonitorConfig(assistance_email="ops@x.com", excluded_document_ids={"d1"})
        assert config.excluded_document_ids == frozenset({"d1"})
        assert isinstance(config.excluded_document_ids, frozenset)

    @pytest.mark.parametrize(
        "changes",
        [
            {"assistance_email": ""},
            {"assistance_email": "not-an-email"},
            {"lookback_window_hours": 0},
            {"page_size": 501},
            {"page_size": 0},
            {"verification_workers": 0},
            {"mail": MailConfig(transport="carrier-pigeon")},
        ],
    )
    def test_validation(self, changes):
        """Test that invalid values raise ConfigError."""
        values = {"assistance_email": "ops@x.com", **changes}
        with pytest.raises(ConfigError):
            MonitorConfig(**values)

    def test_with_overrides(self):
        """Test copying with overrides."""
        config = MonitorConfig(assistance_email="ops@x.com")
        changed = config.with_overrides(lookback_window_hours=1)

        assert changed.lookback_window_hours == 1
        assert config.lookback_window_hours == 24

    def test_with_overrides_validates(self):
        """Test that overrides are validated."""
        with pytest.raises(ConfigError):
            MonitorConfig(assistance_email="ops@x.com").with_overrides(page_size=1000)

    def test_to_dict_masks_secrets(self):
        """Test that secrets are masked."""
        config = MonitorConfig(
            assistance_email="ops@x.com",
            workspace=WorkspaceConfig(service_account_info={"private_key": "k"}),
            mail=MailConfig(smtp_password="hunter2"),
        )

        data = config.to_dict()

        assert data["mail"]["smtp_password"] == "********"
        assert data["workspace"]["service_account_info"] == "********"
        assert "hunter2" not in json.dumps(data)

    def test_from_dict_requires_assistance_email(self):
        """Test that assistance_email is mandatory."""
        with pytest.raises(ConfigError, match="assistance_email"):
            MonitorConfig.from_dict({})

    def test_from_dict_invalid_number(self):
        """Test that malformed numbers raise ConfigError."""
        with pytest.raises(ConfigError):
            MonitorConfig.from_dict({"assistance_email": "ops@x.com", "page_size": "many"})

    def test_from_dict_single_excluded_id(self):
        """Test that a single excluded id is kept whole."""
        config = MonitorConfig.from_dict(
            {"assistance_email": "ops@x.com", "excluded_document_ids": "abc123"}
        )
        assert config.excluded_document_ids == frozenset({"abc123"})

    def test_from_dict_excluded_ids_mapping_rejected(self):
        """Test that a mapping of excluded ids is a configuration error."""
        with pytest.raises(ConfigError, match="excluded_document_ids"):
            MonitorConfig.from_dict(
                {"assistance_email": "ops@x.com", "excluded_document_ids": {"d1": True}}
            )


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML file."""
        path = tmp_path / "sharewatch.yaml"
        path.write_text(
            "assistance_email: ops@x.com\n"
            "lookback_window_hours: 6\n"
            "excluded_document_ids:\n"
            "  - d1\n"
            "  - d2\n"
            "workspace:\n"
            "  delegated_user: admin@x.com\n"
            "mail:\n"
            "  transport: gmail\n"
            "  from_address: securite@x.com\n"
        )

        config = ConfigLoader(path).load()

        assert config.assistance_email == "ops@x.com"
        assert config.lookback_window_hours == 6
        assert config.excluded_document_ids == frozenset({"d1", "d2"})
        assert config.workspace.delegated_user == "admin@x.com"
        assert config.mail.transport == "gmail"

    def test_load_yaml_scalar_exclusion(self, tmp_path):
        """Test a YAML file excluding one document as a plain scalar."""
        path = tmp_path / "sharewatch.yaml"
        path.write_text("assistance_email: ops@x.com\nexcluded_document_ids: 1AbCdEf\n")

        config = ConfigLoader(path).load()

        assert config.excluded_document_ids == frozenset({"1AbCdEf"})

    def test_load_json(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "sharewatch.json"
        path.write_text(json.dumps({"assistance_email": "ops@x.com", "page_size": 100}))

        config = load_config(path)

        assert config.page_size == 100

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader(tmp_path / "missing.yaml").load()

    def test_unparseable_file(self, tmp_path):
        """Test that invalid YAML raises ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("assistance_email: [unclosed\n")

        with pytest.raises(ConfigError, match="Cannot parse"):
            ConfigLoader(path).load()

    def test_non_mapping_file(self, tmp_path):
        """Test that a list document is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader(path).load()

    def test_load_from_environment(self):
        """Test loading from SHAREWATCH_* variables."""
        environ = {
            "SHAREWATCH_ASSISTANCE_EMAIL": "ops@x.com",
            "SHAREWATCH_EXCLUDED_DOCUMENT_IDS": "d1, d2,,",
            "SHAREWATCH_LOOKBACK_WINDOW_HOURS": "12",
            "SHAREWATCH_SMTP_HOST": "smtp.x.com",
            "SHAREWATCH_SMTP_PORT": "2525",
            "SHAREWATCH_SMTP_USE_TLS": "false",
        }

        config = ConfigLoader(environ=environ).load()

        assert config.assistance_email == "ops@x.com"
        assert config.excluded_document_ids == frozenset({"d1", "d2"})
        assert config.lookback_window_hours == 12
        assert config.mail.smtp_host == "smtp.x.com"
        assert config.mail.smtp_port == 2525
        assert config.mail.use_tls is False

    def test_environment_without_assistance_email(self):
        """Test that the environment must name the assistance contact."""
        with pytest.raises(ConfigError):
            ConfigLoader(environ={}).load()

    def test_get_config_caches(self):
        """Test that get_config loads once."""
        loader = ConfigLoader(environ={"SHAREWATCH_ASSISTANCE_EMAIL": "ops@x.com"})
        assert loader.get_config() is loader.get_config()

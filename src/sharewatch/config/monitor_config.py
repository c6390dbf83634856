"""
Monitor configuration for Sharewatch.

Provides the immutable configuration value handed to every pipeline
component, and a loader reading YAML/JSON files or environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from sharewatch.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHAREWATCH_"

REPORTS_AUDIT_SCOPE = "https://www.googleapis.com/auth/admin.reports.audit.readonly"
DRIVE_METADATA_SCOPE = "https://www.googleapis.com/auth/drive.metadata.readonly"
GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"

MAX_PAGE_SIZE = 500

MAIL_TRANSPORTS = ("smtp", "gmail")

_MASK = "********"


@dataclass(frozen=True)
class WorkspaceConfig:
    """
    Google Workspace connection settings.

    Attributes:
        service_account_file: Path to service account JSON file
        service_account_info: Service account info dict (alternative to file)
        delegated_user: Administrator to impersonate (domain-wide delegation)
        customer_id: Workspace customer for audit queries
        scopes: OAuth scopes to request
    """

    service_account_file: str | None = None
    service_account_info: dict[str, Any] | None = None
    delegated_user: str | None = None
    customer_id: str | None = None
    scopes: tuple[str, ...] = (
        REPORTS_AUDIT_SCOPE,
        DRIVE_METADATA_SCOPE,
        GMAIL_SEND_SCOPE,
    )

    @property
    def has_credentials(self) -> bool:
        """Check whether service account credentials are configured."""
        return bool(self.service_account_file or self.service_account_info)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with secrets masked."""
        return {
            "service_account_file": self.service_account_file,
            "service_account_info": _MASK if self.service_account_info else None,
            "delegated_user": self.delegated_user,
            "customer_id": self.customer_id,
            "scopes": list(self.scopes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceConfig:
        """Create from dictionary."""
        scopes = data.get("scopes")
        return cls(
            service_account_file=data.get("service_account_file"),
            service_account_info=data.get("service_account_info"),
            delegated_user=data.get("delegated_user"),
            customer_id=data.get("customer_id"),
            scopes=tuple(scopes) if scopes else cls.scopes,
        )


@dataclass(frozen=True)
class MailConfig:
    """
    Outbound mail settings.

    Attributes:
        transport: smtp or gmail
        from_address: Sender mailbox
        subject: Subject line of owner alerts
        smtp_host: SMTP server host
        smtp_port: SMTP server port
        smtp_user: SMTP login
        smtp_password: SMTP password
        use_tls: Use STARTTLS
    """

    transport: str = "smtp"
    from_address: str = "sharewatch@localhost"
    subject: str = "Alerte : documents partagés publiquement"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    use_tls: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with secrets masked."""
        return {
            "transport": self.transport,
            "from_address": self.from_address,
            "subject": self.subject,
            "smtp_host": self.smtp_host,
            "smtp_port": self.smtp_port,
            "smtp_user": self.smtp_user,
            "smtp_password": _MASK if self.smtp_password else None,
            "use_tls": self.use_tls,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MailConfig:
        """Create from dictionary."""
        defaults = cls()
        return cls(
            transport=data.get("transport", defaults.transport),
            from_address=data.get("from_address", defaults.from_address),
            subject=data.get("subject", defaults.subject),
            smtp_host=data.get("smtp_host", defaults.smtp_host),
            smtp_port=int(data.get("smtp_port", defaults.smtp_port)),
            smtp_user=data.get("smtp_user"),
            smtp_password=data.get("smtp_password"),
            use_tls=_as_bool(data.get("use_tls", defaults.use_tls)),
        )


@dataclass(frozen=True)
class MonitorConfig:
    """
    Read-only configuration for one or more pipeline runs.

    Attributes:
        assistance_email: Operations contact, used as reply-to and for failures
        sender_display_name: Display name of alert emails
        excluded_document_ids: Document ids exempt from alerting
        lookback_window_hours: Trailing window queried on each run
        page_size: Audit page size (1..500)
        verification_workers: Parallel live verifications (1 = sequential)
        workspace: Google Workspace connection settings
        mail: Outbound mail settings
    """

    assistance_email: str
    sender_display_name: str = "Sharewatch"
    excluded_document_ids: frozenset[str] = frozenset()
    lookback_window_hours: float = 24
    page_size: int = MAX_PAGE_SIZE
    verification_workers: int = 1
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    mail: MailConfig = field(default_factory=MailConfig)

    def __post_init__(self) -> None:
        """Normalize and validate configuration."""
        if not isinstance(self.excluded_document_ids, frozenset):
            object.__setattr__(
                self, "excluded_document_ids", frozenset(self.excluded_document_ids)
            )
        self.validate()

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigError: If a value is missing or out of range
        """
        if not self.assistance_email or "@" not in self.assistance_email:
            raise ConfigError(
                f"assistance_email must be an email address, got {self.assistance_email!r}"
            )
        if self.lookback_window_hours <= 0:
            raise ConfigError("lookback_window_hours must be greater than 0")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        if self.verification_workers < 1:
            raise ConfigError("verification_workers must be at least 1")
        if self.mail.transport not in MAIL_TRANSPORTS:
            raise ConfigError(
                f"Unknown mail transport: {self.mail.transport}. "
                f"Available: {', '.join(MAIL_TRANSPORTS)}"
            )

    def with_overrides(self, **changes: Any) -> MonitorConfig:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with secrets masked."""
        return {
            "assistance_email": self.assistance_email,
            "sender_display_name": self.sender_display_name,
            "excluded_document_ids": sorted(self.excluded_document_ids),
            "lookback_window_hours": self.lookback_window_hours,
            "page_size": self.page_size,
            "verification_workers": self.verification_workers,
            "workspace": self.workspace.to_dict(),
            "mail": self.mail.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MonitorConfig:
        """
        Create from dictionary.

        Raises:
            ConfigError: If required keys are missing or values are invalid
        """
        if "assistance_email" not in data:
            raise ConfigError("Missing required setting: assistance_email")

        try:
            return cls(
                assistance_email=data["assistance_email"],
                sender_display_name=data.get("sender_display_name", "Sharewatch"),
                excluded_document_ids=_as_id_set(data.get("excluded_document_ids")),
                lookback_window_hours=float(data.get("lookback_window_hours", 24)),
                page_size=int(data.get("page_size", MAX_PAGE_SIZE)),
                verification_workers=int(data.get("verification_workers", 1)),
                workspace=WorkspaceConfig.from_dict(data.get("workspace") or {}),
                mail=MailConfig.from_dict(data.get("mail") or {}),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


class ConfigLoader:
    """
    Loads monitor configuration.

    Supports loading from JSON/YAML files and environment variables.
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        environ: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize the config loader.

        Args:
            config_path: Path to configuration file
            environ: Environment mapping (defaults to os.environ)
        """
        self._config_path = Path(config_path) if config_path else None
        self._environ = environ if environ is not None else os.environ
        self._config: MonitorConfig | None = None

    def load(self) -> MonitorConfig:
        """
        Load configuration from file, or from the environment when no file is set.

        Raises:
            ConfigError: If the file is missing or the configuration is invalid
        """
        if self._config_path:
            if not self._config_path.exists():
                raise ConfigError(f"Config file not found: {self._config_path}")
            config = self._load_from_file(self._config_path)
        else:
            config = self._load_from_env()
        self._config = config
        return config

    def _load_from_file(self, path: Path) -> MonitorConfig:
        """Load configuration from file."""
        content = path.read_text()

        try:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot parse config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        config = MonitorConfig.from_dict(data)
        logger.info(f"Loaded monitor config from {path}")
        return config

    def _load_from_env(self) -> MonitorConfig:
        """Load configuration from SHAREWATCH_* environment variables."""
        env = self._environ

        def get(name: str, default: Any = None) -> Any:
            return env.get(f"{ENV_PREFIX}{name}", default)

        excluded = get("EXCLUDED_DOCUMENT_IDS", "")
        data: dict[str, Any] = {
            "sender_display_name": get("SENDER_DISPLAY_NAME", "Sharewatch"),
            "excluded_document_ids": [d.strip() for d in excluded.split(",") if d.strip()],
            "lookback_window_hours": get("LOOKBACK_WINDOW_HOURS", 24),
            "page_size": get("PAGE_SIZE", MAX_PAGE_SIZE),
            "verification_workers": get("VERIFICATION_WORKERS", 1),
            "workspace": {
                "service_account_file": get("SERVICE_ACCOUNT_FILE"),
                "delegated_user": get("DELEGATED_USER"),
                "customer_id": get("CUSTOMER_ID"),
            },
            "mail": {
                k: v
                for k, v in {
                    "transport": get("MAIL_TRANSPORT"),
                    "from_address": get("EMAIL_FROM"),
                    "subject": get("EMAIL_SUBJECT"),
                    "smtp_host": get("SMTP_HOST"),
                    "smtp_port": get("SMTP_PORT"),
                    "smtp_user": get("SMTP_USER"),
                    "smtp_password": get("SMTP_PASSWORD"),
                    "use_tls": get("SMTP_USE_TLS"),
                }.items()
                if v is not None
            },
        }
        assistance_email = get("ASSISTANCE_EMAIL")
        if assistance_email:
            data["assistance_email"] = assistance_email

        config = MonitorConfig.from_dict(data)
        logger.info("Loaded monitor config from environment")
        return config

    def get_config(self) -> MonitorConfig:
        """Get the current configuration, loading it on first use."""
        if self._config is None:
            self._config = self.load()
        return self._config


def load_config(config_path: str | Path | None = None) -> MonitorConfig:
    """
    Load monitor configuration.

    Args:
        config_path: Optional YAML/JSON file; environment variables otherwise

    Returns:
        MonitorConfig instance
    """
    return ConfigLoader(config_path).load()


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _as_id_set(value: Any) -> frozenset[str]:
    """Normalize excluded ids given as a list or a single scalar id."""
    if value is None or value == "":
        return frozenset()
    if isinstance(value, (str, int)):
        return frozenset({str(value)})
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(v) for v in value if v not in (None, ""))
    raise ConfigError(
        f"excluded_document_ids must be a list of ids, got {type(value).__name__}"
    )

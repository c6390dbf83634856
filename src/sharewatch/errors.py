"""
Exception hierarchy for Sharewatch.

Only FetchError aborts a run; the other errors shrink the result set.
"""

from __future__ import annotations


class SharewatchError(Exception):
    """Base exception for Sharewatch errors."""

    pass


class ConfigError(SharewatchError):
    """Exception raised for invalid or missing configuration."""

    pass


class FetchError(SharewatchError):
    """Exception raised when the audit trail cannot be retrieved."""

    def __init__(
        self,
        message: str,
        page_number: int | None = None,
        status_code: int | None = None,
    ):
        self.page_number = page_number
        self.status_code = status_code
        super().__init__(message)


class ParseError(SharewatchError):
    """Exception raised for malformed or incomplete audit events."""

    def __init__(self, message: str, missing: list[str] | None = None):
        self.missing = missing or []
        super().__init__(message)


class ResolutionError(SharewatchError):
    """Exception raised when an item identifier cannot be used for resolution."""

    def __init__(self, message: str, item_id: str | None = None):
        self.item_id = item_id
        super().__init__(message)


class NotificationError(SharewatchError):
    """Exception raised when a notification cannot be delivered."""

    def __init__(self, message: str, recipient: str | None = None):
        self.recipient = recipient
        super().__init__(message)

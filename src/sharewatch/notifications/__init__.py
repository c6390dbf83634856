"""
Owner notifications for Sharewatch.

Provides grouping of confirmed exposures by owner, message templates,
mail transports and the per-owner dispatcher.
"""

from sharewatch.notifications.dispatcher import DispatchReport, NotificationDispatcher
from sharewatch.notifications.grouper import OwnerGrouper, group_by_owner
from sharewatch.notifications.templates import (
    ExposureDigestTemplate,
    NotificationTemplate,
    OperationsAlertTemplate,
    RenderedMessage,
    TemplateContext,
)
from sharewatch.notifications.transports import (
    DryRunTransport,
    GmailApiTransport,
    MailTransport,
    OutgoingMessage,
    SmtpTransport,
    build_mime,
    create_transport,
)

__all__ = [
    # Grouping
    "OwnerGrouper",
    "group_by_owner",
    # Templates
    "ExposureDigestTemplate",
    "NotificationTemplate",
    "OperationsAlertTemplate",
    "RenderedMessage",
    "TemplateContext",
    # Transports
    "DryRunTransport",
    "GmailApiTransport",
    "MailTransport",
    "OutgoingMessage",
    "SmtpTransport",
    "build_mime",
    "create_transport",
    # Dispatch
    "DispatchReport",
    "NotificationDispatcher",
]

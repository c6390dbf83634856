"""
Notification dispatch for Sharewatch.

Sends exactly one consolidated message per owner. A failure for one
owner is recorded and the remaining owners are still attempted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sharewatch.config import MonitorConfig
from sharewatch.models import OwnerNotificationBatch
from sharewatch.notifications.templates import (
    ExposureDigestTemplate,
    NotificationTemplate,
    OperationsAlertTemplate,
    TemplateContext,
)
from sharewatch.notifications.transports import MailTransport, OutgoingMessage
from sharewatch.observability import get_logger

logger = get_logger(__name__)


@dataclass
class DispatchReport:
    """
    Outcome of a dispatch.

    Attributes:
        sent: Owners notified successfully, in dispatch order
        failures: Owner email -> error message
    """

    sent: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        """Number of owners attempted."""
        return len(self.sent) + len(self.failures)

    @property
    def all_sent(self) -> bool:
        """Check whether every owner was notified."""
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sent": list(self.sent),
            "failures": dict(self.failures),
        }


class NotificationDispatcher:
    """Composes and sends owner alerts and operations notices."""

    def __init__(
        self,
        config: MonitorConfig,
        transport: MailTransport,
        template: NotificationTemplate | None = None,
        operations_template: NotificationTemplate | None = None,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            config: Monitor configuration (sender name, reply-to, subject)
            transport: Mail transport
            template: Owner alert template
            operations_template: Failure notice template
        """
        self._config = config
        self._transport = transport
        self._template = template or ExposureDigestTemplate(subject=config.mail.subject)
        self._operations_template = operations_template or OperationsAlertTemplate()

    @property
    def transport(self) -> MailTransport:
        """Get the mail transport."""
        return self._transport

    def _message(self, to: str, context: TemplateContext, template: NotificationTemplate) -> OutgoingMessage:
        rendered = template.render(context)
        return OutgoingMessage(
            to=to,
            subject=rendered.subject,
            html_body=rendered.html_body,
            text_body=rendered.text_body,
            reply_to=self._config.assistance_email,
            sender_display_name=self._config.sender_display_name,
            from_address=self._config.mail.from_address,
        )

    def dispatch(self, batch: OwnerNotificationBatch) -> DispatchReport:
        """
        Send one alert per owner.

        Args:
            batch: Confirmed exposures grouped by owner

        Returns:
            DispatchReport with sent owners and per-owner failures
        """
        report = DispatchReport()

        for owner, exposures in batch.items():
            context = TemplateContext(
                recipient=owner,
                exposures=exposures,
                assistance_email=self._config.assistance_email,
                sender_display_name=self._config.sender_display_name,
            )
            try:
                self._transport.send(self._message(owner, context, self._template))
            except Exception as e:
                report.failures[owner] = str(e)
                logger.notification_failed(recipient=owner, error=str(e))
                continue

            report.sent.append(owner)

        logger.info(
            f"Dispatched {len(report.sent)} of {report.attempted} owner alert(s)"
        )
        return report

    def notify_operations(self, error: BaseException | str, run_id: str = "") -> bool:
        """
        Tell the assistance contact that a run failed.

        Args:
            error: Error that aborted the run
            run_id: Identifier of the failed run

        Returns:
            True if the notice was sent
        """
        context = TemplateContext(
            recipient=self._config.assistance_email,
            assistance_email=self._config.assistance_email,
            sender_display_name=self._config.sender_display_name,
            custom_data={"error": str(error), "run_id": run_id},
        )
        try:
            self._transport.send(
                self._message(
                    self._config.assistance_email, context, self._operations_template
                )
            )
        except Exception as e:
            logger.notification_failed(
                recipient=self._config.assistance_email, error=str(e)
            )
            return False

        logger.info(f"Notified operations contact {self._config.assistance_email}")
        return True

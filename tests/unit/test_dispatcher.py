"""
Tests for the notification dispatcher.
"""

from __future__ import annotations

from sharewatch.models import ConfirmedExposure, ExposureLevel, default_item_url
from sharewatch.notifications import NotificationDispatcher, group_by_owner


def _exposure(doc_id: str, owner: str) -> ConfirmedExposure:
    return ConfirmedExposure(
        document_id=doc_id,
        title=f"Doc {doc_id}",
        owner_email=owner,
        url=default_item_url(doc_id),
        exposure_level=ExposureLevel.ANYONE_WITH_LINK,
    )


class TestNotificationDispatcher:
    """Tests for NotificationDispatcher."""

    def test_one_message_per_owner(self, monitor_config, dry_run_transport):
        """Test that each owner receives a single consolidated message."""
        batch = group_by_owner([
            _exposure("d1", "a@x.com"),
            _exposure("d2", "b@x.com"),
            _exposure("d3", "a@x.com"),
        ])
        dispatcher = NotificationDispatcher(monitor_config, dry_run_transport)

        report = dispatcher.dispatch(batch)

        assert report.sent == ["a@x.com", "b@x.com"]
        assert report.all_sent
        assert [m.to for m in dry_run_transport.sent] == ["a@x.com", "b@x.com"]
        first = dry_run_transport.sent[0]
        assert first.subject.endswith("(2)")
        assert "Doc d1" in first.text_body
        assert "Doc d3" in first.text_body
        assert "Doc d2" not in first.text_body

    def test_sender_and_reply_to(self, monitor_config, dry_run_transport):
        """Test sender display name and reply-to address."""
        dispatcher = NotificationDispatcher(monitor_config, dry_run_transport)

        dispatcher.dispatch(group_by_owner([_exposure("d1", "a@x.com")]))

        message = dry_run_transport.sent[0]
        assert message.reply_to == "assistance@x.com"
        assert message.sender_display_name == "Sécurité Drive"
        assert message.from_address == "securite@x.com"

    def test_failure_isolated_per_owner(self, monitor_config, failing_transport):
        """Test that one failing owner does not stop the others."""
        transport = failing_transport({"b@x.com"})
        batch = group_by_owner([
            _exposure("d1", "a@x.com"),
            _exposure("d2", "b@x.com"),
            _exposure("d3", "c@x.com"),
        ])

        report = NotificationDispatcher(monitor_config, transport).dispatch(batch)

        assert transport.attempts == ["a@x.com", "b@x.com", "c@x.com"]
        assert report.sent == ["a@x.com", "c@x.com"]
        assert list(report.failures) == ["b@x.com"]
        assert "mailbox unavailable" in report.failures["b@x.com"]
        assert report.attempted == 3
        assert report.all_sent is False

    def test_empty_batch(self, monitor_config, dry_run_transport):
        """Test that an empty batch sends nothing."""
        report = NotificationDispatcher(monitor_config, dry_run_transport).dispatch(group_by_owner([]))
        assert report.attempted == 0
        assert dry_run_transport.sent == []

    def test_notify_operations(self, monitor_config, dry_run_transport):
        """Test the failure notice to the assistance contact."""
        dispatcher = NotificationDispatcher(monitor_config, dry_run_transport)

        assert dispatcher.notify_operations(RuntimeError("audit down"), run_id="r1") is True

        message = dry_run_transport.sent[0]
        assert message.to == "assistance@x.com"
        assert "audit down" in message.text_body
        assert "r1" in message.text_body

    def test_notify_operations_failure(self, monitor_config, failing_transport):
        """Test that a failed notice returns False instead of raising."""
        dispatcher = NotificationDispatcher(monitor_config, failing_transport({"assistance@x.com"}))
        assert dispatcher.notify_operations("boom") is False

    def test_report_to_dict(self, monitor_config, failing_transport):
        """Test report conversion."""
        transport = failing_transport({"a@x.com"})
        report = NotificationDispatcher(monitor_config, transport).dispatch(
            group_by_owner([_exposure("d1", "a@x.com")])
        )

        data = report.to_dict()

        assert data["sent"] == []
        assert "a@x.com" in data["failures"]

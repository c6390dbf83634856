"""
Owner grouping for Sharewatch.
"""

from __future__ import annotations

from typing import Iterable

from sharewatch.models import ConfirmedExposure, OwnerNotificationBatch


class OwnerGrouper:
    """Partitions confirmed exposures by owner email."""

    def group(self, confirmed: Iterable[ConfirmedExposure]) -> OwnerNotificationBatch:
        """
        Group exposures by owner, preserving encounter order.

        Args:
            confirmed: Confirmed exposures in confirmation order

        Returns:
            One batch entry per owner with at least one exposure
        """
        batch = OwnerNotificationBatch()
        for exposure in confirmed:
            batch.add(exposure)
        return batch


def group_by_owner(confirmed: Iterable[ConfirmedExposure]) -> OwnerNotificationBatch:
    """Convenience wrapper around OwnerGrouper.group()."""
    return OwnerGrouper().group(confirmed)

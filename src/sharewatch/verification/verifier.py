"""
Live state verification for Sharewatch.

Audit events are historical; each candidate is re-checked against the
item's current sharing access so owners who already fixed their sharing
are not alerted.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from sharewatch.errors import ResolutionError
from sharewatch.models import ConfirmedExposure, ExposureCandidate, ExposureLevel
from sharewatch.verification.resolver import ItemResolver

logger = logging.getLogger(__name__)


class LiveStateVerifier:
    """
    Confirms or discards exposure candidates.

    A candidate is confirmed only if its item still resolves and its
    current access is AnyoneOnWeb or AnyoneWithLink.
    """

    def __init__(self, resolver: ItemResolver, max_workers: int = 1) -> None:
        """
        Initialize the verifier.

        Args:
            resolver: Item resolver
            max_workers: Parallel verifications (1 = sequential)
        """
        self._resolver = resolver
        self._max_workers = max(1, max_workers)

    @property
    def max_workers(self) -> int:
        """Number of parallel verifications."""
        return self._max_workers

    def confirm(self, candidate: ExposureCandidate) -> ConfirmedExposure | None:
        """
        Re-check a candidate against live state.

        Args:
            candidate: Exposure candidate

        Returns:
            ConfirmedExposure, or None when the item is gone or restricted
        """
        try:
            item = self._resolver.resolve(
                candidate.document_id, owner_email=candidate.owner_email
            )
        except ResolutionError as e:
            logger.debug(f"Dropping candidate {candidate.document_id!r}: {e}")
            return None

        if not item.found or item.sharing_access is None:
            logger.debug(f"Item {candidate.document_id} no longer exists, dropping")
            return None

        level = ExposureLevel.from_sharing_access(item.sharing_access)
        if not level.is_public:
            logger.debug(
                f"Item {candidate.document_id} is now {item.sharing_access.value}, dropping"
            )
            return None

        return ConfirmedExposure(
            document_id=candidate.document_id,
            title=item.title or candidate.document_title,
            owner_email=candidate.owner_email,
            url=item.url,
            exposure_level=level,
            item_kind=item.kind,
        )

    def confirm_all(
        self, candidates: Sequence[ExposureCandidate]
    ) -> list[ConfirmedExposure]:
        """
        Verify candidates, keeping candidate order in the result.

        Args:
            candidates: Candidates in extraction order

        Returns:
            Confirmed exposures in candidate order
        """
        if self._max_workers == 1 or len(candidates) <= 1:
            results = [self.confirm(c) for c in candidates]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                results = list(executor.map(self.confirm, candidates))

        confirmed = [r for r in results if r is not None]
        logger.info(
            f"Confirmed {len(confirmed)} of {len(candidates)} candidate(s) "
            f"against live sharing state"
        )
        return confirmed

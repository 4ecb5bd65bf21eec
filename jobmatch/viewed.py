"""Viewed-state transitions for match records."""
from __future__ import annotations

from .errors import NotFoundError, OwnershipError
from .logger import get_logger
from .models import MatchRecord
from .repository import MatchRecordStore

logger = get_logger()


class ViewedStateTracker:
    def __init__(self, store: MatchRecordStore):
        self.store = store

    def mark_viewed(self, match_id: str, requesting_candidate_id: str) -> MatchRecord:
        """Flag a match as seen by its owner. Marking twice is a no-op success.

        Raises:
            NotFoundError: If the match does not exist
            OwnershipError: If the match belongs to another candidate
        """
        record = self.store.find_by_id(match_id)
        if record is None:
            raise NotFoundError(f"Job match not found: {match_id}")
        if record.candidate_id != requesting_candidate_id:
            logger.warning(
                "Rejected viewed-state change by non-owner",
                match_id=match_id,
                requesting_candidate_id=requesting_candidate_id,
            )
            raise OwnershipError("You do not have permission to access this job match")

        record.viewed = True
        saved = self.store.save(record)
        logger.debug("Match marked as viewed", match_id=match_id)
        return saved

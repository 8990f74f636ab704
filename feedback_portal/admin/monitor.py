"""
Read-only monitor behind the admin dashboard.

Keeps the last successfully fetched window so a failed refresh leaves the
table as it was.
"""

import logging
from typing import Any, Optional

from feedback_portal.admin.stats import (
    ReviewStats,
    completion_badge,
    compute_stats,
    format_timestamp,
    location_checklist,
    truncate_review,
)
from feedback_portal.config import settings
from feedback_portal.locations import list_locations
from feedback_portal.schemas.review_schema import ReviewIntent
from feedback_portal.store.base import RecordStore, RecordStoreError
from feedback_portal.store.review_intents import fetch_recent

logger = logging.getLogger(__name__)


class ReviewMonitor:
    """Fetches recent review intents and derives dashboard rows and stats."""

    def __init__(self, store: RecordStore, limit: int = settings.admin.recent_limit) -> None:
        self._store = store
        self._limit = limit
        self.reviews: list[ReviewIntent] = []
        self.stats = ReviewStats()
        self.error: Optional[str] = None

    @property
    def location_count(self) -> int:
        return len(list_locations())

    def refresh(self) -> bool:
        """Re-fetch the window. On failure, keep what was displayed."""
        try:
            reviews = fetch_recent(self._store, self._limit)
        except RecordStoreError as e:
            logger.error("Error fetching reviews: %s", e)
            self.error = e.message
            return False
        self.reviews = reviews
        self.stats = compute_stats(reviews, self.location_count)
        self.error = None
        logger.debug("Fetched %d review intents", len(reviews))
        return True

    def rows(self) -> list[dict[str, Any]]:
        """Table rows ready for the template or the JSON API."""
        count = self.location_count
        return [
            {
                "id": review.id,
                "customer_name": review.customer_name,
                "customer_email": review.customer_email,
                "rating": review.rating,
                "badge": completion_badge(review, count).value,
                "completed_count": len(review.completed_locations),
                "locations": location_checklist(review),
                "review_excerpt": truncate_review(review.review_text),
                "created_at": review.created_at,
                "created_display": format_timestamp(review.created_at or ""),
            }
            for review in self.reviews
        ]

"""Writes against the ``feedback`` table."""

import logging

from feedback_portal.schemas.feedback_schema import FeedbackEntry
from feedback_portal.store.base import RecordStore
from feedback_portal.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "feedback"


def insert_feedback(store: RecordStore, entry: FeedbackEntry) -> None:
    """Insert one feedback row. Raises RecordStoreError on failure."""
    row = entry.model_dump()
    row["created_at"] = row.get("created_at") or utc_now_iso()
    store.insert(TABLE, [row])
    logger.info(
        "Feedback saved for booking %s: %s (%d stars)",
        entry.booking_number or "-", entry.feedback_option, entry.rating,
    )

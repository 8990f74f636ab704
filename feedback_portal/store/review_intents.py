"""Reads and writes against the ``google_review_intents`` table."""

import logging

from pydantic import ValidationError

from feedback_portal.schemas.review_schema import ReviewDraft, ReviewIntent
from feedback_portal.store.base import RecordStore, RecordStoreError
from feedback_portal.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "google_review_intents"


def create_intent(store: RecordStore, draft: ReviewDraft) -> ReviewIntent:
    """Insert a new review intent with no completed locations.

    Returns the stored row so the caller can keep its id.
    """
    created = store.insert(TABLE, [{
        "customer_name": draft.customer_name,
        "customer_email": draft.customer_email,
        "rating": draft.rating,
        "review_text": draft.review_text,
        "completed_locations": [],
        "created_at": utc_now_iso(),
    }])
    if not created:
        raise RecordStoreError("Review intent was not saved")
    intent = ReviewIntent.model_validate(created[0])
    logger.info("Review intent %s created for %s", intent.id, intent.customer_email)
    return intent


def update_completed_locations(
    store: RecordStore, record_id: str, completed_locations: list[str]
) -> ReviewIntent:
    """Overwrite the completed location list on one intent, by id."""
    updated = store.update(
        TABLE,
        {"completed_locations": list(completed_locations), "updated_at": utc_now_iso()},
        {"id": record_id},
    )
    if not updated:
        raise RecordStoreError(f"Review intent {record_id} not found")
    return ReviewIntent.model_validate(updated[0])


def fetch_recent(store: RecordStore, limit: int = 50) -> list[ReviewIntent]:
    """Most recent intents, newest first.

    Rows that cannot be read as an intent are logged and left out rather
    than failing the whole window.
    """
    rows = store.select(TABLE, order="created_at", descending=True, limit=limit)
    intents = []
    for row in rows:
        try:
            intents.append(ReviewIntent.model_validate(row))
        except ValidationError as e:
            logger.warning(
                "Skipping unreadable review intent %s: %d error(s)",
                row.get("id", "?"), e.error_count(),
            )
    return intents

"""
Aggregate statistics for the review dashboard.

Computed over the fetched window only (the most recent intents), not the
whole table.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Sequence

from feedback_portal.locations import list_locations
from feedback_portal.schemas.review_schema import ReviewIntent
from feedback_portal.utils import round_half_up

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 100


class CompletionBadge(str, Enum):
    COMPLETE = "Complete"
    PARTIAL = "Partial"
    NOT_STARTED = "Not Started"


@dataclass
class ReviewStats:
    """Summary numbers shown above the dashboard table."""

    total: int = 0
    full_completion: int = 0
    partial_completion: int = 0
    avg_rating: float = 0.0
    avg_locations_completed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_stats(intents: Sequence[ReviewIntent], location_count: int) -> ReviewStats:
    """Counts and one-decimal averages for a window of intents."""
    total = len(intents)
    if not total:
        return ReviewStats()

    lengths = [len(i.completed_locations) for i in intents]
    return ReviewStats(
        total=total,
        full_completion=sum(1 for n in lengths if n == location_count),
        partial_completion=sum(1 for n in lengths if 0 < n < location_count),
        avg_rating=round_half_up(sum(i.rating for i in intents) / total),
        avg_locations_completed=round_half_up(sum(lengths) / total),
    )


def completion_badge(intent: ReviewIntent, location_count: int) -> CompletionBadge:
    count = len(intent.completed_locations)
    if count >= location_count and location_count > 0:
        return CompletionBadge.COMPLETE
    if count > 0:
        return CompletionBadge.PARTIAL
    return CompletionBadge.NOT_STARTED


def location_checklist(intent: ReviewIntent) -> list[dict[str, Any]]:
    """One entry per registry location, flagged if this intent completed it."""
    done = set(intent.completed_locations)
    return [
        {"id": loc.id, "name": loc.name, "completed": loc.id in done}
        for loc in list_locations()
    ]


def truncate_review(text: str, length: int = EXCERPT_LENGTH) -> str:
    if len(text) > length:
        return f"{text[:length]}..."
    return text


def format_timestamp(value: str) -> str:
    """Format an ISO timestamp as e.g. '5 Mar 2026, 10:05 am'.

    Returns the original string if it cannot be parsed.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp: %r", value)
        return value
    hour = parsed.hour % 12 or 12
    meridiem = "am" if parsed.hour < 12 else "pm"
    return f"{parsed.day} {parsed.strftime('%b %Y')}, {hour}:{parsed.minute:02d} {meridiem}"

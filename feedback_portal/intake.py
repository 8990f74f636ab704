"""
Post-clean feedback form tied to a booking number.

Two screens plus a thank-you: pick how the clean went (which seeds a
default star rating), then adjust the stars and optionally add a comment.
Name and email are pre-filled from the booking when it can be found.
"""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypedDict

from feedback_portal.config import FeedbackConfig, settings
from feedback_portal.identity.timer import FallbackTimer
from feedback_portal.schemas.feedback_schema import FeedbackEntry
from feedback_portal.store.base import RecordStore, RecordStoreError
from feedback_portal.store.customers import lookup_customer_by_booking
from feedback_portal.store.feedback import insert_feedback

logger = logging.getLogger(__name__)


class IntakeScreen(str, Enum):
    SELECTING = "selecting"
    DETAIL = "detail"
    SUCCESS = "success"


@dataclass(frozen=True)
class FeedbackOption:
    value: str
    label: str
    icon: str
    default_rating: int


FEEDBACK_OPTIONS: tuple[FeedbackOption, ...] = (
    FeedbackOption("great", "Great", "\U0001F44D", 5),
    FeedbackOption("ok", "Okay", "\U0001F44C", 4),
    FeedbackOption("reclean", "Needs reclean", "\U0001F9F9", 3),
)


def get_option(value: str) -> Optional[FeedbackOption]:
    for option in FEEDBACK_OPTIONS:
        if option.value == value:
            return option
    return None


class IntakeResult(TypedDict, total=False):
    """Outcome of a feedback submission."""

    success: bool
    message: str
    screen: str
    redirect_url: str
    redirect_seconds: int


class FeedbackIntake:
    """State of one feedback form."""

    def __init__(
        self,
        store: RecordStore,
        booking_number: str = "",
        config: FeedbackConfig = settings.feedback,
        redirect_url: str = settings.business.public_site_url,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.booking_number = (booking_number or "").strip()
        self.screen = IntakeScreen.SELECTING
        self.option: Optional[FeedbackOption] = None
        self.rating = 5
        self.feedback = ""
        self.name = ""
        self.email = ""
        self.error: Optional[str] = None
        self._store = store
        self._config = config
        self._redirect_url = redirect_url
        self._redirect_timer = FallbackTimer(clock)

    def prefill(self) -> bool:
        """Fill name and email from the booking. Failure leaves them blank."""
        if not self.booking_number:
            return False
        try:
            contact = lookup_customer_by_booking(self._store, self.booking_number)
        except RecordStoreError as e:
            logger.debug("No customer pre-fill for booking %s: %s", self.booking_number, e)
            return False
        self.name = contact["name"]
        self.email = contact["email"]
        return True

    def select_option(self, value: str) -> FeedbackOption:
        """Choose a sentiment option; resets the rating to its default."""
        option = get_option(value)
        if option is None:
            raise ValueError(f"Unknown feedback option: {value!r}")
        self.option = option
        self.rating = option.default_rating
        self.screen = IntakeScreen.DETAIL
        self.error = None
        return option

    def change_option(self) -> None:
        self.option = None
        self.screen = IntakeScreen.SELECTING

    def set_rating(self, star: int) -> None:
        if isinstance(star, bool) or not isinstance(star, int) or not 1 <= star <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {star!r}")
        self.rating = star

    def set_feedback(self, text: str) -> None:
        self.feedback = text or ""

    def submit(self) -> IntakeResult:
        """Insert the feedback row. A failed insert can be resubmitted."""
        if self.screen == IntakeScreen.SUCCESS:
            return {"success": True, "message": "Feedback already submitted.", "screen": self.screen.value}

        if self.option is None:
            self.error = "Please select a feedback option."
            return {"success": False, "message": self.error, "screen": self.screen.value}

        entry = FeedbackEntry(
            booking_number=self.booking_number,
            feedback_option=self.option.value,
            rating=self.rating,
            feedback=self.feedback,
            name=self.name,
            email=self.email,
        )
        try:
            insert_feedback(self._store, entry)
        except RecordStoreError as e:
            self.error = e.message or "Failed to submit feedback"
            logger.error("Feedback insert failed for booking %s: %s", self.booking_number or "-", e)
            return {"success": False, "message": self.error, "screen": self.screen.value}

        self.error = None
        self.screen = IntakeScreen.SUCCESS
        self._redirect_timer.start(self._config.redirect_seconds)
        return {
            "success": True,
            "message": "Thank you for your feedback!",
            "screen": self.screen.value,
            "redirect_url": self._redirect_url,
            "redirect_seconds": self._config.redirect_seconds,
        }

    def seconds_until_redirect(self) -> Optional[int]:
        if self.screen != IntakeScreen.SUCCESS:
            return None
        return math.ceil(self._redirect_timer.remaining())

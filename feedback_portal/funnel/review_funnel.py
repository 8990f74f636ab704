"""
Review funnel: sign-in, review form, one Google review per location, thanks.

Holds one visitor's in-progress review and drives the record store writes
at each step. Store updates always target the row id captured when the
intent was inserted, and the funnel only moves to the next location after
the update for the current one has been confirmed.

Usage:
    funnel = ReviewFunnel(store, bridge)
    funnel.bridge.load()
    funnel.sign_in(credential)
    funnel.submit_form(rating=5, review_text="...")
    funnel.mark_complete()   # or funnel.skip()
"""

import math
import threading
import time
import uuid
from typing import Any, Callable, Optional, Sequence, TypedDict

from feedback_portal.config import FunnelConfig, settings
from feedback_portal.funnel.state_machine import FunnelState, FunnelStateMachine, FunnelTrigger
from feedback_portal.identity.bridge import BridgeState, IdentityBridge
from feedback_portal.identity.timer import FallbackTimer
from feedback_portal.locations import list_locations
from feedback_portal.logging_context import get_session_logger
from feedback_portal.schemas.identity_schema import GoogleIdentity
from feedback_portal.schemas.location_schema import BusinessLocation
from feedback_portal.schemas.review_schema import ReviewDraft
from feedback_portal.store.base import RecordStore, RecordStoreError
from feedback_portal.store.review_intents import create_intent, update_completed_locations
from feedback_portal.utils import looks_like_email

logger = get_session_logger(__name__)


class FunnelResult(TypedDict, total=False):
    """Result of a funnel action, returned to the page script as JSON."""

    success: bool
    message: str
    state: str
    open_url: str
    open_delay_seconds: float
    redirect_url: str
    redirect_seconds: int


class FunnelError(Exception):
    """Raised when an action is not available on the current screen."""


class ReviewFunnel:
    """One browser tab's pass through the review funnel."""

    def __init__(
        self,
        store: RecordStore,
        bridge: IdentityBridge,
        locations: Optional[Sequence[BusinessLocation]] = None,
        config: FunnelConfig = settings.funnel,
        redirect_url: str = settings.business.public_site_url,
        clock: Callable[[], float] = time.monotonic,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or f"FUN-{uuid.uuid4().hex[:12]}"
        self.bridge = bridge
        self.draft = ReviewDraft(rating=config.default_rating)
        self.current_index = 0
        self.error: Optional[str] = None
        self._store = store
        self._config = config
        self._redirect_url = redirect_url
        self._locations = list(locations) if locations is not None else list_locations()
        self._sm = FunnelStateMachine()
        self._redirect_timer = FallbackTimer(clock)
        # Held for a whole page action, from the state check through the store write
        self._lock = threading.RLock()

        bridge.on_identity(self._handle_identity)
        bridge.on_failure(self._handle_bridge_failure)

    @property
    def state(self) -> FunnelState:
        return self._sm.current_state

    @property
    def locations(self) -> list[BusinessLocation]:
        return list(self._locations)

    @property
    def state_machine(self) -> FunnelStateMachine:
        return self._sm

    def _require(self, *states: FunnelState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise FunnelError(
                f"Action not available on the '{self.state.value}' screen (needs: {allowed})"
            )

    def _result(self, success: bool, message: str, **extra: Any) -> FunnelResult:
        result: FunnelResult = {"success": success, "message": message, "state": self.state.value}
        result.update(extra)  # type: ignore[typeddict-item]
        return result

    def _fail(self, message: str) -> FunnelResult:
        self.error = message
        return self._result(False, message)

    # ------------------------------------------------------------------ #
    # Welcome
    # ------------------------------------------------------------------ #

    def _handle_identity(self, identity: GoogleIdentity) -> None:
        with self._lock:
            if self.state != FunnelState.WELCOME:
                logger.warning("Identity arrived on the '%s' screen, ignoring", self.state.value)
                return
            self.draft = ReviewDraft(
                customer_name=identity.name,
                customer_email=identity.email,
                rating=self._config.default_rating,
                review_text="",
                completed_locations=[],
            )
            self.error = None
            self._sm.transition(FunnelTrigger.IDENTITY_RESOLVED)

    def _handle_bridge_failure(self, state: BridgeState, reason: str) -> None:
        logger.info("Sign-in unavailable (%s), manual path offered: %s", state.value, reason)

    def bridge_event(self, event: str, reason: Optional[str] = None) -> BridgeState:
        """Apply a sign-in script event reported by the page: loaded, failed or timeout."""
        with self._lock:
            if event == "loaded":
                return self.bridge.script_loaded()
            if event == "failed":
                return self.bridge.script_failed(reason or "Failed to load Google Sign-In script")
            if event == "timeout":
                return self.bridge.report_timeout()
            raise ValueError(f"Unknown bridge event: {event!r}")

    def sign_in(self, credential: str) -> FunnelResult:
        """Pass the widget's credential to the bridge."""
        with self._lock:
            self._require(FunnelState.WELCOME)
            identity = self.bridge.receive_credential(credential)
            if identity is None:
                message = self.bridge.error or "Sign-in was not accepted."
                return self._fail(f"Failed to sign in with Google. {message}")
            return self._result(True, f"Signed in as {identity.name or identity.email}.")

    def manual_available(self) -> bool:
        with self._lock:
            self.bridge.check_timeout()
            return self._sm.can_transition(FunnelTrigger.MANUAL_ENTRY) and self.bridge.has_failed

    def start_manual(self) -> FunnelResult:
        """Fallback when Google sign-in failed or timed out."""
        with self._lock:
            self._require(FunnelState.WELCOME)
            if not self.manual_available():
                return self._fail("Please continue with Google.")
            self.draft = ReviewDraft(rating=self._config.default_rating)
            self.error = None
            self._sm.transition(FunnelTrigger.MANUAL_ENTRY)
            logger.info("Funnel continuing without Google sign-in")
            return self._result(True, "Please tell us about your experience.")

    # ------------------------------------------------------------------ #
    # Form
    # ------------------------------------------------------------------ #

    def _validate_form(self, rating: Any, review_text: str, name: str, email: str) -> Optional[str]:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            return "Please choose a rating between 1 and 5 stars."
        minimum = self._config.min_review_length
        length = len(review_text.strip())
        if length < minimum:
            return f"Please write at least {minimum} characters ({length}/{minimum})."
        if not name:
            return "Please enter your name."
        if not looks_like_email(email):
            return "Please enter a valid email address."
        return None

    def submit_form(
        self,
        rating: Any,
        review_text: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> FunnelResult:
        """Save the review intent and open the first location."""
        with self._lock:
            self._require(FunnelState.FORM)
            review_text = review_text or ""
            name = (name if name is not None else self.draft.customer_name).strip()
            email = (email if email is not None else self.draft.customer_email).strip()

            problem = self._validate_form(rating, review_text, name, email)
            if problem:
                return self._fail(problem)

            self.draft.customer_name = name
            self.draft.customer_email = email
            self.draft.rating = rating
            self.draft.review_text = review_text.strip()

            try:
                intent = create_intent(self._store, self.draft)
            except RecordStoreError as e:
                logger.error("Review intent insert failed: %s", e.message)
                return self._fail(f"Could not save your review. {e.message}")

            self.draft.record_id = intent.id
            self.draft.completed_locations = []
            self.error = None
            self._sm.transition(FunnelTrigger.INTENT_SAVED)

            if not self._locations:
                return self._finish("Thanks for your review!")
            return self._open_result("Review saved. Let's post it on Google.", delay=0.0)

    # ------------------------------------------------------------------ #
    # Reviewing
    # ------------------------------------------------------------------ #

    def current_location(self) -> Optional[BusinessLocation]:
        if self.state != FunnelState.REVIEWING or self.current_index >= len(self._locations):
            return None
        return self._locations[self.current_index]

    def _open_result(self, message: str, delay: float) -> FunnelResult:
        location = self._locations[self.current_index]
        return self._result(
            True,
            message,
            open_url=location.review_url,
            open_delay_seconds=delay,
        )

    def open_current(self) -> FunnelResult:
        """Re-open the current location's review page."""
        with self._lock:
            self._require(FunnelState.REVIEWING)
            return self._open_result(
                f"Opening {self._locations[self.current_index].name}.", delay=0.0
            )

    def mark_complete(self, location_id: Optional[str] = None) -> FunnelResult:
        """Record the current location as reviewed, then move on.

        ``location_id`` lets a repeated click be recognised: a stale request
        for a location already recorded changes nothing. The lock is held
        through the store update, so a skip racing this call sees the
        advanced location and is treated as stale.
        """
        with self._lock:
            self._require(FunnelState.REVIEWING)
            location = self._locations[self.current_index]
            completed = self.draft.completed_locations

            if location_id is not None and location_id != location.id:
                if location_id in completed:
                    return self._result(True, "Already recorded.")
                return self._fail("That location is not the one being reviewed.")

            if location.id in completed:
                return self._advance(f"{location.name} already recorded.")

            updated = [*completed, location.id]
            try:
                update_completed_locations(self._store, self.draft.record_id, updated)
            except RecordStoreError as e:
                logger.error("Completion update for %s failed: %s", location.id, e.message)
                return self._fail(
                    f"Could not record your review for {location.name}. {e.message}"
                )

            self.draft.completed_locations = updated
            logger.info(
                "Location %s completed (%d/%d)", location.id, len(updated), len(self._locations)
            )
            return self._advance(f"Thanks for reviewing {location.name}!")

    def skip(self, location_id: Optional[str] = None) -> FunnelResult:
        """Move past the current location without recording it."""
        with self._lock:
            self._require(FunnelState.REVIEWING)
            location = self._locations[self.current_index]
            if location_id is not None and location_id != location.id:
                return self._result(True, "Already moved past that location.")
            logger.info("Location %s skipped", location.id)
            return self._advance(f"Skipped {location.name}.")

    def _advance(self, message: str) -> FunnelResult:
        self.current_index += 1
        self.error = None
        if self.current_index < len(self._locations):
            self._sm.transition(FunnelTrigger.LOCATION_ADVANCED)
            return self._open_result(message, delay=self._config.next_location_delay_seconds)
        return self._finish(message)

    def _finish(self, message: str) -> FunnelResult:
        self._sm.transition(FunnelTrigger.ALL_LOCATIONS_DONE)
        self._redirect_timer.start(self._config.redirect_seconds)
        logger.info(
            "Funnel complete: %d of %d locations reviewed",
            len(self.draft.completed_locations), len(self._locations),
        )
        return self._result(
            True,
            message,
            redirect_url=self._redirect_url,
            redirect_seconds=self._config.redirect_seconds,
        )

    # ------------------------------------------------------------------ #
    # Complete
    # ------------------------------------------------------------------ #

    def summary(self) -> dict[str, Any]:
        """Which locations were reviewed and which were skipped."""
        completed = set(self.draft.completed_locations)
        visited = self._locations[: self.current_index]
        return {
            "completed": [loc.name for loc in visited if loc.id in completed],
            "skipped": [loc.name for loc in visited if loc.id not in completed],
            "completed_count": len(completed),
            "total": len(self._locations),
        }

    def seconds_until_redirect(self) -> Optional[int]:
        if self.state != FunnelState.COMPLETE:
            return None
        return math.ceil(self._redirect_timer.remaining())

    def should_redirect(self) -> bool:
        return self.state == FunnelState.COMPLETE and self._redirect_timer.expired()

    def snapshot(self) -> dict[str, Any]:
        """JSON-serialisable view of the session for the page script."""
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> dict[str, Any]:
        completed = set(self.draft.completed_locations)
        locations = []
        for index, loc in enumerate(self._locations):
            if loc.id in completed:
                status = "completed"
            elif index < self.current_index:
                status = "skipped"
            elif index == self.current_index and self.state == FunnelState.REVIEWING:
                status = "current"
            else:
                status = "pending"
            locations.append({
                "id": loc.id,
                "name": loc.name,
                "address": loc.address,
                "review_url": loc.review_url,
                "status": status,
            })

        current = self.current_location()
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "bridge_state": self.bridge.state.value,
            "manual_available": self.manual_available(),
            "error": self.error,
            "draft": {
                "customer_name": self.draft.customer_name,
                "customer_email": self.draft.customer_email,
                "rating": self.draft.rating,
                "review_text": self.draft.review_text,
                "completed_locations": list(self.draft.completed_locations),
            },
            "min_review_length": self._config.min_review_length,
            "location_index": self.current_index,
            "location_count": len(self._locations),
            "current_location": current.id if current else None,
            "locations": locations,
            "summary": self.summary() if self.state == FunnelState.COMPLETE else None,
            "redirect_url": self._redirect_url,
            "redirect_seconds": self.seconds_until_redirect(),
        }

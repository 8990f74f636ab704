"""
Identity bridge between the review funnel and Google sign-in.

States: idle -> loading -> ready -> (succeeded | failed | timed_out).

The bridge owns the widget handle and the fallback timer, so nothing about
sign-in lives in shared globals. It never retries: once it reaches a
terminal state the funnel offers the manual path instead.

Usage:
    bridge = IdentityBridge(widget, client_id="123.apps.googleusercontent.com")
    bridge.on_identity(handle_identity)
    bridge.load()
    bridge.script_loaded()
    bridge.receive_credential(credential)
"""

import logging
import time
from enum import Enum
from typing import Any, Callable, Optional

from feedback_portal.config import settings
from feedback_portal.identity.timer import FallbackTimer
from feedback_portal.identity.token import IdentityDecodeError, decode_credential
from feedback_portal.identity.widget import SignInWidget
from feedback_portal.logging_context import get_session_logger
from feedback_portal.schemas.identity_schema import GoogleIdentity

logger = get_session_logger(__name__)

BUTTON_TARGET = "google-signin-button"
BUTTON_OPTIONS: dict[str, Any] = {
    "theme": "outline",
    "size": "large",
    "type": "standard",
    "shape": "rectangular",
    "text": "continue_with",
}


class BridgeState(str, Enum):
    """Lifecycle of one sign-in attempt."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


TERMINAL_STATES = frozenset({BridgeState.SUCCEEDED, BridgeState.FAILED, BridgeState.TIMED_OUT})

IdentityListener = Callable[[GoogleIdentity], None]
FailureListener = Callable[[BridgeState, str], None]


class IdentityBridge:
    """Wraps the sign-in widget with a load-once lifecycle and a fallback timeout."""

    def __init__(
        self,
        widget: SignInWidget,
        client_id: Optional[str] = None,
        timeout_seconds: float = settings.identity.timeout_seconds,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._widget = widget
        self._client_id = client_id
        self._timeout_seconds = timeout_seconds
        self._timer = FallbackTimer(clock)
        self._state = BridgeState.IDLE
        self._identity_listeners: list[IdentityListener] = []
        self._failure_listeners: list[FailureListener] = []
        self.identity: Optional[GoogleIdentity] = None
        self.error: Optional[str] = None

    @property
    def widget(self) -> SignInWidget:
        return self._widget

    @property
    def state(self) -> BridgeState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def has_failed(self) -> bool:
        """True once the manual path should be offered."""
        return self._state in (BridgeState.FAILED, BridgeState.TIMED_OUT)

    def timeout_remaining(self) -> float:
        return self._timer.remaining()

    def on_identity(self, listener: IdentityListener) -> None:
        self._identity_listeners.append(listener)

    def on_failure(self, listener: FailureListener) -> None:
        self._failure_listeners.append(listener)

    # ------------------------------------------------------------------ #
    # Lifecycle events
    # ------------------------------------------------------------------ #

    def load(self) -> BridgeState:
        """Begin loading the sign-in script. Only the first call has any effect."""
        if self._state != BridgeState.IDLE:
            logger.debug("Sign-in script already requested (state: %s)", self._state.value)
            return self._state

        if not self._client_id:
            self._fail(BridgeState.FAILED, "Google Client ID not configured")
            return self._state

        self._state = BridgeState.LOADING
        self._timer.start(self._timeout_seconds)
        logger.debug("Loading sign-in script, fallback in %.1fs", self._timeout_seconds)
        return self._state

    def script_loaded(self) -> BridgeState:
        """The script arrived: initialize the widget and render its button."""
        if self.check_timeout() in TERMINAL_STATES:
            return self._state
        if self._state != BridgeState.LOADING:
            logger.debug("Ignoring script load in state %s", self._state.value)
            return self._state

        try:
            self._widget.initialize(self._client_id, self.receive_credential)
            self._widget.render_button(BUTTON_TARGET, BUTTON_OPTIONS)
        except Exception as e:
            self._fail(BridgeState.FAILED, f"Error initializing Google Sign-In: {e}")
            return self._state

        self._state = BridgeState.READY
        logger.info("Google Sign-In initialized")
        return self._state

    def script_failed(self, reason: str = "Failed to load Google Sign-In script") -> BridgeState:
        if not self.is_terminal:
            self._fail(BridgeState.FAILED, reason)
        return self._state

    def report_timeout(self) -> BridgeState:
        """The page's own fallback timer fired before any credential arrived."""
        if not self.is_terminal:
            self._fail(BridgeState.TIMED_OUT, "Google Sign-In did not respond in time")
        return self._state

    def check_timeout(self) -> BridgeState:
        """Fire the fallback if its deadline has passed."""
        if not self.is_terminal and self._timer.expired():
            self._fail(BridgeState.TIMED_OUT, "Google Sign-In did not respond in time")
        return self._state

    def receive_credential(self, credential: str) -> Optional[GoogleIdentity]:
        """Widget callback. Returns the identity, or None if it was not accepted.

        A credential that arrives after the fallback has fired is dropped so
        the funnel never jumps back from the manual path.
        """
        self.check_timeout()
        if self.is_terminal:
            logger.warning("Credential ignored, sign-in already %s", self._state.value)
            return None
        if self._state != BridgeState.READY:
            logger.warning("Credential ignored, widget not ready (state: %s)", self._state.value)
            return None

        self._timer.cancel()
        try:
            identity = decode_credential(credential)
        except IdentityDecodeError as e:
            self._fail(BridgeState.FAILED, str(e))
            return None

        self._state = BridgeState.SUCCEEDED
        self.identity = identity
        logger.info("Google Sign-In succeeded for %s", identity.email)
        for listener in self._identity_listeners:
            listener(identity)
        return identity

    def _fail(self, state: BridgeState, reason: str) -> None:
        self._timer.cancel()
        self._state = state
        self.error = reason
        logger.warning("Identity bridge %s: %s", state.value, reason)
        for listener in self._failure_listeners:
            listener(state, reason)

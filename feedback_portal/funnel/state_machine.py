"""
Finite state machine for the Google review funnel.

Four screens and explicit transitions with triggers. Every visitor follows
a deterministic path: welcome -> form -> reviewing (once per location)
-> complete.

Usage:
    sm = FunnelStateMachine()
    sm.transition(FunnelTrigger.IDENTITY_RESOLVED)
    assert sm.current_state == FunnelState.FORM
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class FunnelState(str, Enum):
    """Screens of the review funnel."""
    WELCOME = "welcome"
    FORM = "form"
    REVIEWING = "reviewing"
    COMPLETE = "complete"


class FunnelTrigger(str, Enum):
    """Events that move the funnel between screens."""
    IDENTITY_RESOLVED = "identity_resolved"
    MANUAL_ENTRY = "manual_entry"
    INTENT_SAVED = "intent_saved"
    LOCATION_ADVANCED = "location_advanced"
    ALL_LOCATIONS_DONE = "all_locations_done"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: FunnelState
    to_state: FunnelState
    trigger: FunnelTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: FunnelState
    entered_at: datetime
    trigger: Optional[FunnelTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class FunnelStateMachine:
    """
    Deterministic state machine controlling funnel progression.

    Every transition must be explicitly defined. A button press that has
    no matching transition from the current screen is rejected with the
    list of triggers that are allowed.
    """

    TRANSITIONS: list[Transition] = [
        # --- Welcome ---
        Transition(FunnelState.WELCOME, FunnelState.FORM, FunnelTrigger.IDENTITY_RESOLVED),
        Transition(FunnelState.WELCOME, FunnelState.FORM, FunnelTrigger.MANUAL_ENTRY),

        # --- Form ---
        Transition(FunnelState.FORM, FunnelState.REVIEWING, FunnelTrigger.INTENT_SAVED),

        # --- Per-location posting ---
        Transition(FunnelState.REVIEWING, FunnelState.REVIEWING, FunnelTrigger.LOCATION_ADVANCED),
        Transition(FunnelState.REVIEWING, FunnelState.COMPLETE, FunnelTrigger.ALL_LOCATIONS_DONE),
    ]

    def __init__(self) -> None:
        self._current_state = FunnelState.WELCOME
        self._history: list[StateEntry] = [
            StateEntry(state=FunnelState.WELCOME, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> FunnelState:
        return self._current_state

    def transition(self, trigger: FunnelTrigger) -> FunnelState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new funnel state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Funnel transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def can_transition(self, trigger: FunnelTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def get_valid_triggers(self) -> list[FunnelTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state == FunnelState.COMPLETE

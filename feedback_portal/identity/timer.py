"""Cancellable deadline timer on an injectable monotonic clock."""

import time
from typing import Callable, Optional


class FallbackTimer:
    """
    One-shot deadline. Nothing runs in the background: owners ask
    ``expired()`` whenever an event arrives.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._deadline: Optional[float] = None

    @property
    def active(self) -> bool:
        return self._deadline is not None

    def start(self, seconds: float) -> None:
        self._deadline = self._clock() + seconds

    def cancel(self) -> None:
        self._deadline = None

    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def remaining(self) -> float:
        """Seconds left, 0.0 when expired or not running."""
        if self._deadline is None:
            return 0.0
        return max(self._deadline - self._clock(), 0.0)

"""
Live funnel sessions, one per page load.

Sessions are never persisted. Reloading the page starts a new one; the
oldest sessions are evicted once the registry is full.
"""

import logging
import threading
from collections import OrderedDict
from typing import Optional

from feedback_portal.funnel.review_funnel import ReviewFunnel

logger = logging.getLogger(__name__)


class FunnelSessionRegistry:
    """Bounded, thread-safe map of session id to ReviewFunnel."""

    def __init__(self, max_sessions: int = 500) -> None:
        self._max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ReviewFunnel]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, funnel: ReviewFunnel) -> None:
        with self._lock:
            self._sessions[funnel.session_id] = funnel
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.debug("Evicted funnel session %s", evicted)

    def get(self, session_id: str) -> Optional[ReviewFunnel]:
        with self._lock:
            funnel = self._sessions.get(session_id)
            if funnel is not None:
                self._sessions.move_to_end(session_id)
            return funnel

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

"""Correlation ID logging context for tracing a visitor through the funnel.

Attaches the funnel session token to every log record so one browser tab
can be followed from sign-in to the final redirect. ``load_config`` installs
the filter on the root handlers and prints ``%(session_id)s`` in the log
format; requests that don't belong to a funnel session log ``NO_SESSION``.

Usage:
    from feedback_portal.logging_context import get_session_logger, set_session_id

    set_session_id("FUN-abc123")
    logger = get_session_logger(__name__)
    logger.info("Review intent saved")  # ... [FUN-abc123] INFO: Review intent saved
"""

import logging
from contextvars import ContextVar
from typing import Optional

NO_SESSION = "NO_SESSION"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)


def set_session_id(session_id: str) -> None:
    """Set the correlation ID for the current request context."""
    _session_id.set(session_id)


def clear_session_id() -> None:
    """Forget the correlation ID; worker threads are reused across requests."""
    _session_id.set(NO_SESSION)


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def install_session_id_filter(logger: Optional[logging.Logger] = None) -> None:
    """Add a SessionIdFilter to each handler of ``logger`` (the root logger by default).

    Handler filters see records propagated from every module logger, so a
    format string using ``%(session_id)s`` never meets a record without it.
    """
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    The filter adds ``session_id`` to each record, which also reaches
    handlers that were attached after ``load_config`` ran.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger

"""Shared utilities used across the feedback portal."""

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, the format the store expects."""
    return datetime.now(timezone.utc).isoformat()


def round_half_up(value: float, places: int = 1) -> float:
    """Round like a person would: 4.25 -> 4.3, never banker's rounding.

    Examples:
        >>> round_half_up(4.25)
        4.3
        >>> round_half_up(1.75)
        1.8
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def looks_like_email(value: str) -> bool:
    """Loose client-side email shape check."""
    return bool(_EMAIL_RE.match(value.strip()))

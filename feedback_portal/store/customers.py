"""
Customer lookup by booking number, used to pre-fill the feedback form.

Two single-row fetches: the booking by ``booking_number``, then the
customer by ``booking_id``.
"""

import logging
from typing import TypedDict

from feedback_portal.store.base import RecordStore

logger = logging.getLogger(__name__)


class CustomerContact(TypedDict):
    """Name and email shown read-only on the feedback form."""

    name: str
    email: str


def lookup_customer_by_booking(store: RecordStore, booking_number: str) -> CustomerContact:
    """Look up the customer behind a booking. Raises on store errors or no match."""
    booking = store.select_single("bookings", "id", {"booking_number": booking_number})
    customer = store.select_single(
        "customers", "first_name, last_name, email", {"booking_id": booking["id"]}
    )
    name = " ".join(
        part for part in (customer.get("first_name"), customer.get("last_name")) if part
    )
    logger.debug("Customer found for booking %s: %s", booking_number, name)
    return {"name": name, "email": customer.get("email") or ""}

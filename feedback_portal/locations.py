"""
Google Business Profile locations.

Review links are the official ``g.page`` short links from each location's
"Get more reviews" panel; they redirect to the location's review form.
"""

import logging
import re
from typing import Optional

from feedback_portal.schemas.location_schema import BusinessLocation

logger = logging.getLogger(__name__)

REVIEW_URL_PATTERN = re.compile(r"^https://g\.page/r/[A-Za-z0-9_-]+/review$")

BUSINESS_LOCATIONS: tuple[BusinessLocation, ...] = (
    BusinessLocation(
        id="melbourne",
        name="Cleaning Professionals - Melbourne VIC",
        address="Melbourne VIC, Australia",
        place_id="CatIouiPpkIsEBM",
        review_url="https://g.page/r/CatIouiPpkIsEBM/review",
    ),
    BusinessLocation(
        id="brunswick",
        name="Cleaning Professionals - Brunswick",
        address="Coburg VIC 3058, Australia",
        place_id="CZTz9YgMQeIEEBM",
        review_url="https://g.page/r/CZTz9YgMQeIEEBM/review",
    ),
    BusinessLocation(
        id="epping",
        name="Cleaning Professionals - Epping",
        address="6 Eva Pl, Epping VIC 3076, Australia",
        place_id="CUm3TZyufX2PEBM",
        review_url="https://g.page/r/CUm3TZyufX2PEBM/review",
    ),
)

_BY_ID: dict[str, BusinessLocation] = {loc.id: loc for loc in BUSINESS_LOCATIONS}


def list_locations() -> list[BusinessLocation]:
    """Return all locations in their fixed display order."""
    return list(BUSINESS_LOCATIONS)


def location_ids() -> list[str]:
    return [loc.id for loc in BUSINESS_LOCATIONS]


def get_location(location_id: str) -> Optional[BusinessLocation]:
    """Get a location by id. Returns None if unknown."""
    return _BY_ID.get(location_id)


def url_for(location_id: str) -> Optional[str]:
    """Review link for a location, or None for an unknown id."""
    location = _BY_ID.get(location_id)
    return location.review_url if location else None


def get_location_names() -> list[str]:
    return [loc.name for loc in BUSINESS_LOCATIONS]


def all_configured() -> bool:
    """True when every location has a place id and a g.page review link."""
    configured = all(
        loc.place_id and REVIEW_URL_PATTERN.match(loc.review_url)
        for loc in BUSINESS_LOCATIONS
    )
    if not configured:
        logger.warning("One or more business locations lack a g.page review link")
    return configured

"""Review intent records and per-session funnel state."""

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ReviewIntent(BaseModel):
    """Row in the ``google_review_intents`` table."""
    id: str
    customer_name: str = ""
    customer_email: str = ""
    rating: int = Field(default=5, ge=1, le=5)
    review_text: str = ""
    completed_locations: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("customer_name", "customer_email", "review_text", mode="before")
    @classmethod
    def null_text_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("completed_locations", mode="before")
    @classmethod
    def null_list_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ReviewFormSubmission(BaseModel):
    """Payload posted by the review form screen."""
    rating: int
    review_text: str = ""
    name: Optional[str] = None
    email: Optional[str] = None


class LocationAction(BaseModel):
    """Payload for the mark-complete and skip buttons."""
    location_id: Optional[str] = None


@dataclass
class ReviewDraft:
    """
    In-progress review held by one funnel session.

    ``record_id`` is the store id returned by the initial insert; every
    later update targets that row directly.
    """
    customer_name: str = ""
    customer_email: str = ""
    rating: int = 5
    review_text: str = ""
    completed_locations: list[str] = field(default_factory=list)
    record_id: Optional[str] = None

"""Feedback form records."""

from typing import Optional

from pydantic import BaseModel, Field


class FeedbackEntry(BaseModel):
    """Row inserted into the ``feedback`` table. Never read back."""
    booking_number: str = ""
    feedback_option: str
    rating: int = Field(ge=1, le=5)
    feedback: str = ""
    name: str = ""
    email: str = ""
    created_at: Optional[str] = None


class FeedbackSubmission(BaseModel):
    """Payload posted by the feedback page."""
    booking_number: str = ""
    feedback_option: str = ""
    rating: Optional[int] = None
    feedback: str = ""
    name: str = ""
    email: str = ""

"""Decoded Google identity assertion."""

from typing import Optional

from pydantic import BaseModel


class GoogleIdentity(BaseModel):
    """Profile fields carried in the payload segment of a Google ID token."""
    name: str = ""
    email: str
    picture: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None

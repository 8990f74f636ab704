"""Business location data model."""

from pydantic import BaseModel, ConfigDict


class BusinessLocation(BaseModel):
    """A Google Business Profile location customers can review."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str
    place_id: str
    review_url: str

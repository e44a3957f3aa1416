"""
Payload shapes of the two review sources and the request bodies of the ingestion routes.
"""
from pydantic import BaseModel, Field, StrictStr
from typing import Optional, List

from schemas.review import CamelModel


class HostawayReviewCategory(BaseModel):
    category: str
    rating: float


class HostawayReviewPayload(CamelModel):
    """One entry of ``result`` in a Hostaway ``GET /reviews`` response."""
    id: int
    type: str = "guest-to-host"
    status: str = "published"
    rating: Optional[float] = None
    public_review: Optional[str] = ""
    review_category: List[HostawayReviewCategory] = []
    submitted_at: str
    guest_name: str
    listing_name: str


class GoogleReviewPayload(BaseModel):
    """One entry of ``result.reviews`` in a Google Places details response."""
    author_name: str
    author_url: Optional[str] = None
    language: Optional[str] = None
    profile_photo_url: Optional[str] = None
    rating: Optional[float] = None
    relative_time_description: Optional[str] = None
    text: Optional[str] = ""
    time: int


class GoogleIngestRequest(CamelModel):
    property_id: StrictStr = Field(..., min_length=1)
    property_name: StrictStr = Field(..., min_length=1)
    place_id: Optional[StrictStr] = None


class PlaceIdAssignment(CamelModel):
    property_id: StrictStr = Field(..., min_length=1)
    place_id: StrictStr = Field(..., min_length=1)

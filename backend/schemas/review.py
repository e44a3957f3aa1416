from pydantic import BaseModel, Field, StrictBool, StrictStr, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from core.constants import ReviewSource, ReviewStatus, ReviewType
from services.rating import normalize_rating, display_category_rating


class CamelModel(BaseModel):
    """Base schema whose wire names are camelCase (guestName, isApprovedForPublic, ...)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ReviewCategoryCreate(CamelModel):
    category: str = Field(..., min_length=1, max_length=100)
    rating: float


class ReviewCreate(CamelModel):
    """A review normalized from a source payload, ready to be stored."""
    source: ReviewSource
    type: ReviewType = ReviewType.GUEST_TO_HOST
    status: ReviewStatus = ReviewStatus.PUBLISHED
    rating: Optional[float] = None
    overall_rating: Optional[float] = None
    public_review: str = ""
    private_review: Optional[str] = None
    submitted_at: datetime
    guest_name: str = Field(..., min_length=1, max_length=255)
    property_id: str = Field(..., min_length=1, max_length=255)
    property_name: str = Field(..., min_length=1, max_length=255)
    is_approved_for_public: bool = False
    manager_notes: Optional[str] = None
    categories: List[ReviewCategoryCreate] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class ReviewCategoryResponse(CamelModel):
    id: UUID
    category: str
    rating: float
    # Rating as shown next to the review (see services.rating.display_category_rating)
    display_rating: Optional[float] = None


class ReviewResponse(CamelModel):
    id: UUID
    source: str
    type: str
    status: str
    rating: Optional[float]
    overall_rating: Optional[float] = None
    normalized_rating: Optional[float] = None
    public_review: str
    private_review: Optional[str] = None
    submitted_at: datetime
    guest_name: str
    property_id: str
    property_name: str
    is_approved_for_public: bool
    manager_notes: Optional[str] = None
    categories: List[ReviewCategoryResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def apply_display_ratings(self) -> "ReviewResponse":
        self.normalized_rating = normalize_rating(self.source, self.rating)
        for category in self.categories:
            category.display_rating = display_category_rating(self.source, category.rating)
        return self


class ReviewUpdate(CamelModel):
    """
    Manager update of a single review. Omitted fields stay unchanged; explicit
    nulls and wrongly typed values are rejected.
    """
    id: StrictStr = Field(..., min_length=1)
    is_approved_for_public: Optional[StrictBool] = None
    manager_notes: Optional[StrictStr] = None

    @field_validator("is_approved_for_public", "manager_notes")
    @classmethod
    def reject_explicit_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class SourceRating(CamelModel):
    average_rating: float = 0.0
    review_count: int = 0
    rated_count: int = 0


class PropertyStats(CamelModel):
    property_id: str
    property_name: str
    total_reviews: int = 0
    approved_reviews: int = 0
    pending_reviews: int = 0
    average_rating: float = 0.0
    source_ratings: Dict[str, SourceRating] = {}
    category_averages: Dict[str, float] = {}


class RatingBucket(CamelModel):
    rating: int
    count: int


class PropertyDetail(CamelModel):
    stats: PropertyStats
    rating_distribution: List[RatingBucket]


class PublicProperty(CamelModel):
    property_id: str
    property_name: str
    stats: PropertyStats
    reviews: List[ReviewResponse]

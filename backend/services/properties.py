from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import ErrorMessages
from core.exceptions import NotFoundException
from schemas.review import PropertyDetail, PropertyStats, PublicProperty, ReviewResponse
from services.aggregation import (
    aggregate_property_stats,
    compute_property_stats,
    empty_property_stats,
    rating_distribution,
)
from services.review import ReviewService


class PropertyService:
    """Property views derived from stored reviews."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.review_service = ReviewService(db)

    async def list_property_stats(self) -> List[PropertyStats]:
        reviews = await self.review_service.get_reviews()
        return aggregate_property_stats(reviews)

    async def get_property_detail(self, property_id: str) -> PropertyDetail:
        reviews = await self.review_service.get_reviews(property_id=property_id)
        if not reviews:
            raise NotFoundException(message=ErrorMessages.PROPERTY_NOT_FOUND, resource="property")

        return PropertyDetail(
            stats=compute_property_stats(reviews),
            rating_distribution=rating_distribution(reviews),
        )

    async def get_public_property(self, property_id: str) -> PublicProperty:
        """
        What a guest-facing page may show: approved reviews only, with
        statistics computed over those reviews.
        """
        property_name = await self.review_service.get_property_name(property_id)
        if property_name is None:
            raise NotFoundException(message=ErrorMessages.PROPERTY_NOT_FOUND, resource="property")

        approved = await self.review_service.get_reviews(property_id=property_id, approved_only=True)
        if approved:
            stats = compute_property_stats(approved)
        else:
            stats = empty_property_stats(property_id, property_name)

        return PublicProperty(
            property_id=property_id,
            property_name=property_name,
            stats=stats,
            reviews=[ReviewResponse.model_validate(review) for review in approved],
        )

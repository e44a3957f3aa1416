import math
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, asc, desc
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from core.config import settings
from core.constants import (
    DEFAULT_SORT_BY,
    SORTABLE_FIELDS,
    ErrorMessages,
    MOCK_GOOGLE_GUEST_NAMES,
    ReviewSource,
    SortOrder,
)
from core.exceptions import DatabaseException, NotFoundException
from core.logging import structured_logger
from models.review import Review, ReviewCategory
from schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate

NATURAL_KEY = ("source", "guest_name", "submitted_at", "property_id")

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self):
        return select(Review).options(selectinload(Review.categories))

    async def get_review_by_id(self, review_id: uuid.UUID, refresh: bool = False) -> Optional[Review]:
        query = self._base_query().filter(Review.id == review_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_by_natural_key(self, source: str, guest_name: str, submitted_at: datetime, property_id: str) -> Optional[Review]:
        result = await self.db.execute(
            self._base_query()
            .filter_by(source=source, guest_name=guest_name, property_id=property_id)
            .filter(Review.submitted_at == submitted_at)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_reviews(
        self,
        search: Optional[str] = None,
        source: Optional[str] = None,
        status: Optional[str] = None,
        property_id: Optional[str] = None,
        min_rating: Optional[float] = None,
        max_rating: Optional[float] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Dict:
        page = max(1, page or 1)
        limit = min(settings.MAX_PAGE_SIZE, max(1, limit or settings.DEFAULT_PAGE_SIZE))

        conditions = []
        if search:
            conditions.append(or_(
                Review.guest_name.icontains(search, autoescape=True),
                Review.public_review.icontains(search, autoescape=True),
                Review.property_name.icontains(search, autoescape=True),
            ))
        if source:
            conditions.append(Review.source == source)
        if status:
            conditions.append(Review.status == status)
        if property_id:
            conditions.append(Review.property_id == property_id)
        # Comparisons never match a NULL rating
        if min_rating is not None:
            conditions.append(Review.rating >= min_rating)
        if max_rating is not None:
            conditions.append(Review.rating <= max_rating)
        if start_date is not None:
            conditions.append(Review.submitted_at >= _as_utc(start_date))
        if end_date is not None:
            conditions.append(Review.submitted_at <= _as_utc(end_date))

        sort_column = getattr(Review, SORTABLE_FIELDS.get(sort_by or "", DEFAULT_SORT_BY))
        direction = asc if sort_order == SortOrder.ASC.value else desc

        query = (
            self._base_query()
            .filter(*conditions)
            .order_by(direction(sort_column), direction(Review.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        total_query = select(func.count()).select_from(Review).filter(*conditions)

        total = (await self.db.execute(total_query)).scalar_one()
        reviews = (await self.db.execute(query)).scalars().all()

        return {
            "data": [ReviewResponse.model_validate(r) for r in reviews],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    async def update_review(self, review_data: ReviewUpdate) -> Review:
        try:
            review_id = uuid.UUID(review_data.id)
        except ValueError:
            raise NotFoundException(message=ErrorMessages.REVIEW_NOT_FOUND, resource="review")

        review = await self.get_review_by_id(review_id)
        if not review:
            raise NotFoundException(message=ErrorMessages.REVIEW_NOT_FOUND, resource="review")

        changes = review_data.model_dump(exclude_unset=True, exclude={"id"})
        for key, value in changes.items():
            setattr(review, key, value)
        await self.db.commit()

        structured_logger.log_business_event(
            "review_updated",
            {"review_id": str(review_id), "fields": sorted(changes)},
        )
        return await self.get_review_by_id(review_id, refresh=True)

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise DatabaseException(message=f"Review upsert is not supported on '{dialect}'")
        return insert

    async def upsert_review(self, review_data: ReviewCreate) -> Tuple[Review, bool]:
        """
        Store a review unless one with the same (source, guest_name,
        submitted_at, property_id) exists. The existing row is returned
        untouched. Returns (review, created).
        """
        values = review_data.model_dump(exclude={"categories"})
        values["id"] = uuid.uuid4()
        values["submitted_at"] = _as_utc(values["submitted_at"])

        insert = self._dialect_insert()
        statement = (
            insert(Review)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(NATURAL_KEY))
            .returning(Review.id)
        )
        inserted_id = (await self.db.execute(statement)).scalar_one_or_none()

        if inserted_id is not None:
            for category in review_data.categories:
                self.db.add(ReviewCategory(
                    review_id=inserted_id,
                    category=category.category,
                    rating=category.rating,
                ))
        await self.db.commit()

        review = await self.get_by_natural_key(
            values["source"], values["guest_name"], values["submitted_at"], values["property_id"]
        )
        if review is None:
            raise DatabaseException(message="Review vanished after upsert")
        return review, inserted_id is not None

    async def get_reviews(self, property_id: Optional[str] = None, approved_only: bool = False) -> Sequence[Review]:
        query = self._base_query().order_by(Review.submitted_at.desc(), Review.id)
        if property_id is not None:
            query = query.filter(Review.property_id == property_id)
        if approved_only:
            query = query.filter(Review.is_approved_for_public.is_(True))
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_known_properties(self) -> List[Tuple[str, str]]:
        """(property_id, property_name) for every property that has at least one review."""
        result = await self.db.execute(
            select(Review.property_id, func.min(Review.property_name))
            .group_by(Review.property_id)
            .order_by(Review.property_id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get_property_name(self, property_id: str) -> Optional[str]:
        result = await self.db.execute(
            select(Review.property_name).filter(Review.property_id == property_id).limit(1)
        )
        return result.scalars().first()

    async def delete_mock_google_reviews(self) -> int:
        """Delete Google reviews left behind by the illustrative dataset."""
        result = await self.db.execute(
            self._base_query().filter(
                Review.source == ReviewSource.GOOGLE.value,
                Review.guest_name.in_(MOCK_GOOGLE_GUEST_NAMES),
            )
        )
        reviews = result.scalars().all()
        for review in reviews:
            await self.db.delete(review)
        await self.db.commit()

        structured_logger.log_business_event("mock_reviews_cleaned", {"deleted": len(reviews)})
        return len(reviews)

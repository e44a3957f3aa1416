from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import SuccessMessages
from core.database import get_db
from core.exceptions import APIException
from core.utils.response import Response
from schemas.review import ReviewResponse, ReviewUpdate
from services.review import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get("")
async def list_reviews(
    search: Optional[str] = Query(None),
    source: Optional[str] = Query(None),
    review_status: Optional[str] = Query(None, alias="status"),
    property_id: Optional[str] = Query(None, alias="propertyId"),
    min_rating: Optional[float] = Query(None, alias="minRating"),
    max_rating: Optional[float] = Query(None, alias="maxRating"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """List stored reviews with filtering, sorting and pagination."""
    try:
        review_service = ReviewService(db)
        result = await review_service.list_reviews(
            search=search,
            source=source,
            status=review_status,
            property_id=property_id,
            min_rating=min_rating,
            max_rating=max_rating,
            start_date=start_date,
            end_date=end_date,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        return Response.success(data=result["data"], pagination=result["pagination"])
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch reviews",
            detail=str(e)
        )


@router.patch("")
async def update_review(
    review_data: ReviewUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Approve or reject a review and/or set its manager notes."""
    try:
        review_service = ReviewService(db)
        review = await review_service.update_review(review_data)

        message = SuccessMessages.REVIEW_UPDATED
        if "is_approved_for_public" in review_data.model_fields_set:
            message = (
                SuccessMessages.REVIEW_APPROVED if review_data.is_approved_for_public
                else SuccessMessages.REVIEW_REJECTED
            )
        return Response.success(data=ReviewResponse.model_validate(review), message=message)
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to update review",
            detail=str(e)
        )

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.exceptions import APIException
from core.utils.response import Response
from services.properties import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get("")
async def list_properties(db: AsyncSession = Depends(get_db)):
    """Aggregated review statistics for every property."""
    try:
        stats = await PropertyService(db).list_property_stats()
        return Response.success(data=stats)
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch property statistics",
            detail=str(e)
        )


@router.get("/{property_id}")
async def get_property(property_id: str, db: AsyncSession = Depends(get_db)):
    try:
        detail = await PropertyService(db).get_property_detail(property_id)
        return Response.success(data=detail)
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch property",
            detail=str(e)
        )


@router.get("/{property_id}/public")
async def get_public_property(property_id: str, db: AsyncSession = Depends(get_db)):
    """Approved reviews of a property, as shown on its public page."""
    try:
        public_view = await PropertyService(db).get_public_property(property_id)
        return Response.success(data=public_view)
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch public property page",
            detail=str(e)
        )

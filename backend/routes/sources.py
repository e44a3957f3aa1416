from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import ErrorMessages
from core.database import get_db
from core.dependencies import get_google_places_client, get_ingestion_service, get_place_id_registry
from core.exceptions import APIException, NotFoundException
from core.utils.response import Response
from schemas.sources import GoogleIngestRequest, PlaceIdAssignment
from services.google_places import GooglePlacesClient, PlaceIdRegistry
from services.ingestion import IngestionResult, IngestionService
from services.review import ReviewService

router = APIRouter(prefix="/reviews", tags=["Review Sources"])

SOURCE_MODE_PATTERN = "^(real|mock)$"


def _ingestion_response(result: IngestionResult, message: Optional[str] = None) -> Response:
    return Response.success(
        data=result.reviews,
        message=message,
        count=len(result.reviews),
        source=result.mode,
    )


@router.get("/hostaway")
async def ingest_hostaway_reviews(
    source: str = Query("real", pattern=SOURCE_MODE_PATTERN),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """Fetch Hostaway reviews, store the new ones and return the batch."""
    try:
        result = await ingestion.ingest_hostaway(requested_mock=source == "mock")
        return _ingestion_response(result)
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch Hostaway reviews",
            detail=str(e)
        )


@router.get("/google")
async def ingest_google_reviews(
    source: str = Query("real", pattern=SOURCE_MODE_PATTERN),
    property_id: Optional[str] = Query(None, alias="propertyId"),
    force_mock: bool = Query(False, alias="forceMock"),
    db: AsyncSession = Depends(get_db),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """
    Fetch Google reviews for one property, or for every property that already
    has reviews when no propertyId is given.
    """
    try:
        requested_mock = source == "mock" or force_mock
        if property_id:
            property_name = await ReviewService(db).get_property_name(property_id)
            if property_name is None:
                raise NotFoundException(message=ErrorMessages.PROPERTY_NOT_FOUND, resource="property")
            result = await ingestion.ingest_google_for_property(property_id, property_name, requested_mock)
        else:
            result = await ingestion.ingest_google_for_all(requested_mock)
        return _ingestion_response(result)
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch Google reviews",
            detail=str(e)
        )


@router.post("/google")
async def ingest_google_reviews_for_place(
    request_data: GoogleIngestRequest,
    google: GooglePlacesClient = Depends(get_google_places_client),
    registry: PlaceIdRegistry = Depends(get_place_id_registry),
    ingestion: IngestionService = Depends(get_ingestion_service)
):
    """Register a property's Google Place (searching for it when no placeId is given) and ingest its reviews."""
    try:
        place_id = request_data.place_id
        if not place_id:
            info = registry.address_for(request_data.property_id) or {}
            place_id = await google.find_place_id_for_property(
                request_data.property_name, info.get("address")
            )
            if not place_id:
                raise NotFoundException(
                    message=f"No Google place found for '{request_data.property_name}'",
                    resource="place",
                )

        registry.set(request_data.property_id, place_id)
        result = await ingestion.ingest_google_for_place(request_data.property_id, request_data.property_name)
        return _ingestion_response(result, message=f"Imported Google reviews for place {place_id}")
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to import Google reviews",
            detail=str(e)
        )


@router.delete("/google/cleanup")
async def cleanup_mock_google_reviews(db: AsyncSession = Depends(get_db)):
    """Remove illustrative Google reviews from the store."""
    try:
        deleted = await ReviewService(db).delete_mock_google_reviews()
        return Response.success(
            data={"deletedCount": deleted},
            message=f"Deleted {deleted} mock Google reviews",
        )
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to clean up mock Google reviews",
            detail=str(e)
        )


@router.get("/google/place-ids")
async def get_place_ids(
    refresh: bool = Query(False),
    google: GooglePlacesClient = Depends(get_google_places_client),
    registry: PlaceIdRegistry = Depends(get_place_id_registry)
):
    """Known property addresses and the Place IDs discovered for them."""
    try:
        if refresh:
            await google.refresh_place_ids()
        return Response.success(data={
            "propertyAddresses": registry.property_addresses(),
            "placeIds": registry.discovered_place_ids(),
        })
    except APIException:
        raise
    except Exception as e:
        raise APIException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch Place IDs",
            detail=str(e)
        )


@router.post("/google/place-ids")
async def set_place_id(
    assignment: PlaceIdAssignment,
    registry: PlaceIdRegistry = Depends(get_place_id_registry)
):
    registry.set(assignment.property_id, assignment.place_id)
    return Response.success(
        data={"propertyId": assignment.property_id, "placeId": assignment.place_id},
        message="Place ID updated",
    )

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from services.google_places import GooglePlacesClient, PlaceIdRegistry
from services.hostaway import HostawayClient
from services.ingestion import IngestionService


def get_place_id_registry(request: Request) -> PlaceIdRegistry:
    return request.app.state.place_id_registry


def get_hostaway_client(request: Request) -> HostawayClient:
    return request.app.state.hostaway_client


def get_google_places_client(request: Request) -> GooglePlacesClient:
    return request.app.state.google_places_client


async def get_ingestion_service(
    db: AsyncSession = Depends(get_db),
    hostaway: HostawayClient = Depends(get_hostaway_client),
    google: GooglePlacesClient = Depends(get_google_places_client),
) -> IngestionService:
    """Ingestion service bound to the request's session and the shared source clients"""
    return IngestionService(db, hostaway=hostaway, google=google)

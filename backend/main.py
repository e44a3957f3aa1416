from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.database import db_manager, initialize_db
from core.logging import setup_logging
from core.middleware import RequestLoggingMiddleware
# Import exceptions and handlers
from core.exceptions import (
    APIException,
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)
import models  # noqa: F401  registers tables on Base.metadata
from routes import health_router, properties_router, review_router, sources_router
from services.google_places import GooglePlacesClient, PlaceIdRegistry
from services.hostaway import HostawayClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup event
    setup_logging(
        level=settings.LOG_LEVEL,
        log_format=settings.LOG_FORMAT,
        enable_file_logging=settings.LOG_TO_FILE,
        log_dir=settings.LOG_DIR,
    )
    logger.info(f"Starting reviews API in {settings.ENVIRONMENT} environment")

    initialize_db(settings.SQLALCHEMY_DATABASE_URI)
    if settings.AUTO_CREATE_TABLES:
        await db_manager.create_tables()
        logger.info("Database tables ensured")

    http_client = httpx.AsyncClient(timeout=settings.EXTERNAL_API_TIMEOUT)
    registry = PlaceIdRegistry()
    app.state.http_client = http_client
    app.state.place_id_registry = registry
    app.state.hostaway_client = HostawayClient(
        http_client,
        account_id=settings.HOSTAWAY_ACCOUNT_ID,
        api_key=settings.HOSTAWAY_API_KEY,
        base_url=settings.HOSTAWAY_BASE_URL,
    )
    app.state.google_places_client = GooglePlacesClient(
        http_client,
        api_key=settings.GOOGLE_PLACES_API_KEY,
        registry=registry,
        base_url=settings.GOOGLE_PLACES_BASE_URL,
    )

    if not settings.hostaway_configured:
        logger.warning("Hostaway credentials missing; Hostaway requests will serve illustrative data")
    if not settings.google_places_configured:
        logger.warning("Google Places API key missing; real-mode Google requests will return no reviews")
    if settings.USE_MOCK_DATA:
        logger.info("USE_MOCK_DATA is set; every source serves illustrative data")

    yield
    # Shutdown event
    await http_client.aclose()
    await db_manager.dispose()


app = FastAPI(
    title="Flex Living Reviews API",
    description="Collects guest reviews from Hostaway and Google, lets managers curate them and serves per-property statistics.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(review_router)
app.include_router(sources_router)
app.include_router(properties_router)
app.include_router(health_router)


@app.get("/")
async def read_root():
    return {
        "service": "Flex Living Reviews API",
        "status": "Running",
        "version": "1.0.0",
    }


# Register exception handlers
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

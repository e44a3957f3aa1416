"""
Fetch reviews from the sources, normalize them and store them idempotently.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import ExternalServiceException
from core.logging import structured_logger
from schemas.review import ReviewCreate, ReviewResponse
from services.google_places import GooglePlacesClient, normalize_google_review
from services.hostaway import HostawayClient, normalize_hostaway_review
from services.review import ReviewService


@dataclass
class IngestionResult:
    reviews: List[ReviewResponse] = field(default_factory=list)
    used_mock: bool = False
    fetched: int = 0
    created: int = 0
    skipped: int = 0

    @property
    def mode(self) -> str:
        return "mock" if self.used_mock else "api"


class IngestionService:
    def __init__(
        self,
        db: AsyncSession,
        hostaway: Optional[HostawayClient] = None,
        google: Optional[GooglePlacesClient] = None,
        use_mock_data: Optional[bool] = None,
    ):
        self.db = db
        self.hostaway = hostaway
        self.google = google
        self.use_mock_data = settings.USE_MOCK_DATA if use_mock_data is None else use_mock_data
        self.review_service = ReviewService(db)

    def wants_mock(self, requested_mock: bool = False) -> bool:
        """Mock data is served when requested or forced by configuration."""
        return bool(requested_mock or self.use_mock_data)

    async def _fetch(self, client, fetch: Callable, use_mock: bool):
        """
        Returns (raw_reviews, used_mock).

        In real mode a failed or empty fetch falls back to the client's
        illustrative dataset only when the client allows it; otherwise it
        yields an empty list.
        """
        if use_mock:
            return client.get_mock_reviews(), True

        try:
            raw_reviews = await fetch()
        except ExternalServiceException as e:
            structured_logger.warning(
                f"Fetching {client.source.value} reviews failed",
                metadata={"source": client.source.value},
                exception=e,
            )
            raw_reviews = []

        if not raw_reviews and client.fallback_to_mock:
            structured_logger.info(
                f"No {client.source.value} reviews from API, using illustrative data",
                metadata={"source": client.source.value},
            )
            return client.get_mock_reviews(), True
        return raw_reviews, False

    async def _store(self, raw_reviews: List[Dict[str, Any]], normalize: Callable[[Dict[str, Any]], ReviewCreate], result: IngestionResult) -> None:
        result.fetched += len(raw_reviews)
        for raw in raw_reviews:
            try:
                review_data = normalize(raw)
            except (ValueError, TypeError, KeyError) as e:
                structured_logger.warning("Skipping malformed review", metadata={"raw": raw}, exception=e)
                result.skipped += 1
                continue

            try:
                review, created = await self.review_service.upsert_review(review_data)
            except SQLAlchemyError as e:
                await self.db.rollback()
                structured_logger.error(
                    "Failed to store review",
                    metadata={"guest_name": review_data.guest_name, "property_id": review_data.property_id},
                    exception=e,
                )
                result.skipped += 1
                continue

            # Snapshot now; a later rollback expires ORM instances
            result.reviews.append(ReviewResponse.model_validate(review))
            if created:
                result.created += 1

    def _log_result(self, source: str, result: IngestionResult, **extra) -> None:
        structured_logger.log_business_event(
            "reviews_ingested",
            {
                "source": source,
                "mode": result.mode,
                "fetched": result.fetched,
                "created": result.created,
                "skipped": result.skipped,
                **extra,
            },
        )

    async def ingest_hostaway(self, requested_mock: bool = False) -> IngestionResult:
        result = IngestionResult()
        raw_reviews, result.used_mock = await self._fetch(
            self.hostaway, self.hostaway.get_reviews, self.wants_mock(requested_mock)
        )
        await self._store(raw_reviews, normalize_hostaway_review, result)
        self._log_result("hostaway", result)
        return result

    async def ingest_google_for_property(
        self, property_id: str, property_name: str, requested_mock: bool = False
    ) -> IngestionResult:
        result = IngestionResult()
        await self._ingest_google_into(result, property_id, property_name, self.wants_mock(requested_mock))
        self._log_result("google", result, property_id=property_id)
        return result

    async def ingest_google_for_all(self, requested_mock: bool = False) -> IngestionResult:
        """Ingest Google reviews for every property that already has reviews."""
        use_mock = self.wants_mock(requested_mock)
        result = IngestionResult(used_mock=use_mock)
        for property_id, property_name in await self.review_service.get_known_properties():
            await self._ingest_google_into(result, property_id, property_name, use_mock)
        self._log_result("google", result)
        return result

    async def _ingest_google_into(self, result: IngestionResult, property_id: str, property_name: str, use_mock: bool) -> None:
        raw_reviews, used_mock = await self._fetch(
            self.google, lambda: self.google.get_property_reviews(property_id), use_mock
        )
        result.used_mock = result.used_mock or used_mock
        await self._store(
            raw_reviews,
            lambda raw: normalize_google_review(raw, property_id, property_name),
            result,
        )

    async def ingest_google_for_place(self, property_id: str, property_name: str) -> IngestionResult:
        """Real-mode ingestion for a property whose Place ID was just registered."""
        result = IngestionResult()
        await self._ingest_google_into(result, property_id, property_name, use_mock=False)
        self._log_result("google", result, property_id=property_id)
        return result

"""
Google Places reviews: Place ID registry, API client, illustrative dataset and
normalization into ReviewCreate.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from core.constants import PROPERTY_ADDRESSES, ReviewSource, ReviewStatus, ReviewType
from core.exceptions import ExternalServiceException
from schemas.review import ReviewCreate
from schemas.sources import GoogleReviewPayload

logger = logging.getLogger(__name__)

PLACE_DETAILS_FIELDS = "name,formatted_address,rating,user_ratings_total,reviews,geometry"


class PlaceIdRegistry:
    """
    Known property addresses and the Google Place IDs discovered for them.

    One instance lives on the application state for the lifetime of the app
    and is handed to request handlers through a dependency.
    """

    def __init__(self, property_addresses: Optional[Dict[str, Dict[str, str]]] = None):
        self._addresses: Dict[str, Dict[str, str]] = {
            key: dict(value) for key, value in (property_addresses or PROPERTY_ADDRESSES).items()
        }
        self._place_ids: Dict[str, str] = {}

    def get(self, property_id: str) -> Optional[str]:
        return self._place_ids.get(property_id)

    def set(self, property_id: str, place_id: str) -> None:
        self._place_ids[property_id] = place_id

    def address_for(self, property_id: str) -> Optional[Dict[str, str]]:
        return self._addresses.get(property_id)

    def property_addresses(self) -> Dict[str, Dict[str, str]]:
        return {key: dict(value) for key, value in self._addresses.items()}

    def discovered_place_ids(self) -> Dict[str, str]:
        return dict(self._place_ids)


def normalize_google_review(raw: Dict[str, Any], property_id: str, property_name: str) -> ReviewCreate:
    """
    Map one Google review to the common schema.

    Google does not know our properties, so the caller supplies them. The
    rating is kept on Google's native 1-5 scale and no categories exist.
    """
    payload = GoogleReviewPayload.model_validate(raw)

    return ReviewCreate(
        source=ReviewSource.GOOGLE,
        type=ReviewType.GUEST_TO_HOST,
        status=ReviewStatus.PUBLISHED,  # already public on Google
        rating=payload.rating,
        overall_rating=payload.rating,
        public_review=payload.text or "",
        submitted_at=datetime.fromtimestamp(payload.time, tz=timezone.utc),
        guest_name=payload.author_name,
        property_id=property_id,
        property_name=property_name,
        is_approved_for_public=False,
        categories=[],
    )


class GooglePlacesClient:
    """Async client for the Places text-search and details endpoints."""

    source = ReviewSource.GOOGLE
    # Illustrative reviews must never be attributed to a real place, so real
    # mode degrades to an empty result.
    fallback_to_mock = False

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        registry: PlaceIdRegistry,
        base_url: str = "https://maps.googleapis.com/maps/api/place",
    ):
        self.http = http
        self.api_key = api_key
        self.registry = registry
        self.base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.configured:
            raise ExternalServiceException("Google Places API key is not configured", service="google")
        try:
            response = await self.http.get(f"{self.base_url}{path}", params={**params, "key": self.api_key})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Google Places API error: {e.response.status_code} - {e.response.text}")
            raise ExternalServiceException(
                f"Google Places API returned {e.response.status_code}", service="google"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google Places request failed: {e}")
            raise ExternalServiceException(f"Google Places request failed: {e}", service="google") from e

    async def search_place(self, query: str) -> Dict[str, Any]:
        return await self._get("/textsearch/json", {"query": query})

    async def get_place_details(self, place_id: str) -> Optional[Dict[str, Any]]:
        data = await self._get("/details/json", {"place_id": place_id, "fields": PLACE_DETAILS_FIELDS})
        if data.get("status") != "OK":
            logger.error(f"Google Places API error: {data.get('status')}")
            return None
        return data.get("result")

    async def find_place_id_for_property(self, property_name: str, address: Optional[str] = None) -> Optional[str]:
        """First text-search hit for the property, or None. Lookup failures are logged, not raised."""
        query = f"{property_name} {address}" if address else property_name
        try:
            data = await self.search_place(query)
        except ExternalServiceException as e:
            logger.error(f"Error finding place ID for '{query}': {e.message}")
            return None

        results = data.get("results") or []
        if data.get("status") == "OK" and results:
            place_id = results[0].get("place_id")
            logger.info(f"Found Place ID {place_id} for query '{query}'")
            return place_id

        logger.info(f"No place found for query '{query}'")
        return None

    async def resolve_place_id(self, property_id: str) -> Optional[str]:
        """Registered Place ID for the property, discovering and registering it from its address if needed."""
        place_id = self.registry.get(property_id)
        if place_id:
            return place_id

        info = self.registry.address_for(property_id)
        if not info:
            return None

        place_id = await self.find_place_id_for_property(info["name"], info["address"])
        if place_id:
            self.registry.set(property_id, place_id)
        return place_id

    async def refresh_place_ids(self) -> Dict[str, str]:
        """Re-resolve every known address; returns the IDs found in this pass."""
        discovered: Dict[str, str] = {}
        for property_id, info in self.registry.property_addresses().items():
            place_id = await self.find_place_id_for_property(info["name"], info["address"])
            if place_id:
                self.registry.set(property_id, place_id)
                discovered[property_id] = place_id
        return discovered

    async def get_property_reviews(self, property_id: str) -> List[Dict[str, Any]]:
        place_id = await self.resolve_place_id(property_id)
        if not place_id:
            logger.warning(f"No Google Place ID found for property: {property_id}")
            return []

        details = await self.get_place_details(place_id)
        return (details or {}).get("reviews") or []

    def get_mock_reviews(self) -> List[Dict[str, Any]]:
        return [dict(review) for review in MOCK_GOOGLE_REVIEWS]


# Illustrative dataset in the shape of Google Places review objects.
# Guest names must stay in sync with core.constants.MOCK_GOOGLE_GUEST_NAMES.
MOCK_GOOGLE_REVIEWS: List[Dict[str, Any]] = [
    {
        "author_name": "David Smith",
        "language": "en",
        "rating": 5,
        "relative_time_description": "2 weeks ago",
        "text": "Excellent location and service. The apartment was spotless and the host was very responsive. Highly recommend for business travelers.",
        "time": 1717200000,
    },
    {
        "author_name": "Maria Rodriguez",
        "language": "en",
        "rating": 4,
        "relative_time_description": "1 month ago",
        "text": "Great stay overall. The location is perfect for exploring London. Only minor issue was the WiFi was occasionally slow.",
        "time": 1715990400,
    },
    {
        "author_name": "John Anderson",
        "language": "en",
        "rating": 5,
        "relative_time_description": "2 months ago",
        "text": "Outstanding property! Modern, clean, and perfectly located. The host went above and beyond to ensure our comfort.",
        "time": 1712620800,
    },
]

"""
Hostaway property-management platform: API client, illustrative dataset and
normalization into ReviewCreate.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from core.constants import ReviewSource, ReviewStatus, ReviewType
from core.exceptions import ExternalServiceException
from schemas.review import ReviewCreate, ReviewCategoryCreate
from schemas.sources import HostawayReviewPayload

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    """'2B N1 A - 29 Shoreditch Heights' -> '2b-n1-a-29-shoreditch-heights'"""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def parse_submitted_at(value: str) -> datetime:
    """Hostaway timestamps are 'YYYY-MM-DD HH:MM:SS' in UTC; ISO strings are accepted too."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_hostaway_review(raw: Dict[str, Any]) -> ReviewCreate:
    """
    Map one Hostaway review to the common schema.

    The rating stays on Hostaway's native 1-10 scale. When the overall rating
    is missing, overall_rating falls back to the mean of the category ratings.
    Raises ValueError (pydantic ValidationError) for unusable records.
    """
    payload = HostawayReviewPayload.model_validate(raw)

    categories = [
        ReviewCategoryCreate(category=item.category, rating=item.rating)
        for item in payload.review_category
    ]
    overall_rating = payload.rating
    if overall_rating is None and categories:
        overall_rating = sum(c.rating for c in categories) / len(categories)

    review_type = payload.type if payload.type in {t.value for t in ReviewType} else ReviewType.GUEST_TO_HOST.value
    status = payload.status if payload.status in {s.value for s in ReviewStatus} else ReviewStatus.PENDING.value

    return ReviewCreate(
        source=ReviewSource.HOSTAWAY,
        type=review_type,
        status=status,
        rating=payload.rating,
        overall_rating=overall_rating,
        public_review=payload.public_review or "",
        submitted_at=parse_submitted_at(payload.submitted_at),
        guest_name=payload.guest_name,
        property_id=slugify(payload.listing_name),
        property_name=payload.listing_name,
        is_approved_for_public=False,
        categories=categories,
    )


class HostawayClient:
    """Thin async client for the Hostaway public API (client-credentials auth)."""

    source = ReviewSource.HOSTAWAY
    # The sandbox account returns no reviews, so an empty or failed real fetch
    # serves the illustrative dataset instead.
    fallback_to_mock = True

    def __init__(
        self,
        http: httpx.AsyncClient,
        account_id: str,
        api_key: str,
        base_url: str = "https://api.hostaway.com/v1",
    ):
        self.http = http
        self.account_id = account_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._access_token: Optional[str] = None

    @property
    def configured(self) -> bool:
        return bool(self.account_id and self.api_key)

    async def _get_access_token(self) -> str:
        if self._access_token:
            return self._access_token

        response = await self.http.post(
            f"{self.base_url}/accessTokens",
            data={
                "grant_type": "client_credentials",
                "client_id": self.account_id,
                "client_secret": self.api_key,
                "scope": "general",
            },
            headers={"Cache-Control": "no-cache"},
        )
        response.raise_for_status()
        token = response.json().get("access_token")
        if not token:
            raise ExternalServiceException("Hostaway did not return an access token", service="hostaway")
        self._access_token = token
        return token

    async def get_reviews(self) -> List[Dict[str, Any]]:
        """Fetch raw reviews. Raises ExternalServiceException on any transport or API failure."""
        if not self.configured:
            raise ExternalServiceException("Hostaway credentials are not configured", service="hostaway")

        try:
            token = await self._get_access_token()
            response = await self.http.get(
                f"{self.base_url}/reviews",
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 403:
                # Expired token; the next call re-authenticates
                self._access_token = None
            logger.error(f"Hostaway API error: {e.response.status_code} - {e.response.text}")
            raise ExternalServiceException(
                f"Hostaway API returned {e.response.status_code}", service="hostaway"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Hostaway request failed: {e}")
            raise ExternalServiceException(f"Hostaway request failed: {e}", service="hostaway") from e

        if body.get("status") != "success":
            raise ExternalServiceException(
                f"Hostaway API status: {body.get('status')}", service="hostaway"
            )
        return body.get("result") or []

    def get_mock_reviews(self) -> List[Dict[str, Any]]:
        return [dict(review) for review in MOCK_HOSTAWAY_REVIEWS]


# Illustrative dataset in the shape of the Hostaway reviews API
MOCK_HOSTAWAY_REVIEWS: List[Dict[str, Any]] = [
    {
        "id": 7453,
        "type": "host-to-guest",
        "status": "published",
        "rating": None,
        "publicReview": "Shane and family are wonderful! Would definitely host again :)",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 10},
            {"category": "communication", "rating": 10},
            {"category": "respect_house_rules", "rating": 10},
        ],
        "submittedAt": "2020-08-21 22:45:14",
        "guestName": "Shane Finkelstein",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    },
    {
        "id": 7454,
        "type": "guest-to-host",
        "status": "published",
        "rating": 9,
        "publicReview": "Lovely flat in a great spot. Check-in was smooth and the place was spotless.",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 10},
            {"category": "communication", "rating": 9},
            {"category": "location", "rating": 9},
        ],
        "submittedAt": "2024-03-14 09:12:00",
        "guestName": "Emma Clarke",
        "listingName": "2B N1 A - 29 Shoreditch Heights",
    },
    {
        "id": 7455,
        "type": "guest-to-host",
        "status": "published",
        "rating": 6,
        "publicReview": "Good location but the heating was broken for two nights.",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 7},
            {"category": "communication", "rating": 6},
            {"category": "value", "rating": 5},
        ],
        "submittedAt": "2024-04-02 18:30:45",
        "guestName": "Tom Becker",
        "listingName": "1B E2 B - 45 Canary Wharf Tower",
    },
    {
        "id": 7456,
        "type": "guest-to-host",
        "status": "published",
        "rating": 10,
        "publicReview": "Perfect for a work trip, fast wifi and a view over the river.",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 10},
            {"category": "location", "rating": 10},
            {"category": "value", "rating": 9},
        ],
        "submittedAt": "2024-05-20 07:05:10",
        "guestName": "Priya Nair",
        "listingName": "1B E2 B - 45 Canary Wharf Tower",
    },
    {
        "id": 7457,
        "type": "guest-to-host",
        "status": "pending",
        "rating": 8,
        "publicReview": "Compact studio, very clean, a few minutes from the station.",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 9},
            {"category": "communication", "rating": 8},
        ],
        "submittedAt": "2024-06-11 12:00:00",
        "guestName": "Lucas Martin",
        "listingName": "Studio S3 - 12 Kings Cross Central",
    },
    {
        "id": 7458,
        "type": "guest-to-host",
        "status": "published",
        "rating": 4,
        "publicReview": "Noisy at night and the kitchen was not cleaned before arrival.",
        "reviewCategory": [
            {"category": "cleanliness", "rating": 3},
            {"category": "communication", "rating": 6},
        ],
        "submittedAt": "2024-07-01 21:40:00",
        "guestName": "Hannah Schmidt",
        "listingName": "Studio S3 - 12 Kings Cross Central",
    },
]

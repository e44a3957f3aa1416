"""
Application-wide constants shared by services and routes.
"""
from enum import Enum
from typing import Dict


class ReviewSource(str, Enum):
    HOSTAWAY = "hostaway"
    GOOGLE = "google"


class ReviewType(str, Enum):
    GUEST_TO_HOST = "guest-to-host"
    HOST_TO_GUEST = "host-to-guest"


class ReviewStatus(str, Enum):
    PUBLISHED = "published"
    PENDING = "pending"
    REJECTED = "rejected"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


NORMALIZED_MAX_RATING = 5.0

DEFAULT_SORT_BY = "submitted_at"

# Columns a client may sort on, keyed by both wire (camelCase) and column names
SORTABLE_FIELDS: Dict[str, str] = {
    "submittedAt": "submitted_at",
    "submitted_at": "submitted_at",
    "rating": "rating",
    "guestName": "guest_name",
    "guest_name": "guest_name",
    "propertyName": "property_name",
    "property_name": "property_name",
    "source": "source",
    "status": "status",
    "createdAt": "created_at",
    "created_at": "created_at",
}


class ErrorMessages:
    GENERIC = "An unexpected error occurred"
    VALIDATION = "Invalid input provided"
    NOT_FOUND = "Resource not found"
    REVIEW_NOT_FOUND = "Review not found"
    PROPERTY_NOT_FOUND = "Property not found"
    DATABASE = "A database error occurred"


class SuccessMessages:
    REVIEW_UPDATED = "Review updated successfully"
    REVIEW_APPROVED = "Review approved for public display"
    REVIEW_REJECTED = "Review rejected"


# Guest names used by the illustrative Google dataset; cleanup deletes these
MOCK_GOOGLE_GUEST_NAMES = ("David Smith", "Maria Rodriguez", "John Anderson")

# Known properties with addresses for Google Place ID discovery
PROPERTY_ADDRESSES: Dict[str, Dict[str, str]] = {
    "2b-n1-a-29-shoreditch-heights": {
        "name": "29 Shoreditch Heights",
        "address": "29 Shoreditch High Street, London E1 6JQ, UK",
    },
    "1b-e2-b-45-canary-wharf-tower": {
        "name": "45 Canary Wharf Tower",
        "address": "45 Bank Street, Canary Wharf, London E14 5AB, UK",
    },
    "studio-s3-12-kings-cross-central": {
        "name": "12 Kings Cross Central",
        "address": "12 Pancras Square, Kings Cross, London N1C 4AG, UK",
    },
    "wembley-stadium": {
        "name": "Wembley Stadium",
        "address": "Wembley Stadium, Wembley HA9 0WS, UK",
    },
}

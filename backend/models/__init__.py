# Models package - Consolidated imports only
from .review import Review, ReviewCategory

__all__ = [
    "Review",
    "ReviewCategory",
]

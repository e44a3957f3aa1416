"""
Rating normalization.

Every consumer that needs a rating on the common 5-star basis goes through
these functions; no other module does scale arithmetic.
"""
from typing import Optional, Union

from core.constants import ReviewSource, NORMALIZED_MAX_RATING

SourceLike = Union[ReviewSource, str]


def _source_value(source: SourceLike) -> str:
    return source.value if isinstance(source, ReviewSource) else str(source)


def normalize_rating(source: SourceLike, rating: Optional[float]) -> Optional[float]:
    """
    Convert a source-native rating to the 5-star basis.

    Google ratings are already on 1-5; a value above 5 is treated as a
    doubled rating, halved and capped at 5. Hostaway ratings (1-10) are halved.
    Returns None for an absent rating.
    """
    if rating is None:
        return None

    rating = float(rating)
    if _source_value(source) == ReviewSource.GOOGLE.value:
        if rating > NORMALIZED_MAX_RATING:
            return min(rating / 2, NORMALIZED_MAX_RATING)
        return rating

    return rating / 2


def display_category_rating(source: SourceLike, rating: float) -> float:
    """
    Category rating as displayed next to a single review.

    Google category ratings are normalized; Hostaway categories are shown on
    their native 1-10 scale. Aggregated category averages never normalize
    (see services.aggregation).
    """
    if _source_value(source) == ReviewSource.GOOGLE.value:
        return normalize_rating(source, rating)
    return float(rating)

"""
Per-property review statistics, recomputed from the review set on every call.
"""
import math
from typing import Dict, Iterable, List, Sequence

from core.constants import ReviewSource, NORMALIZED_MAX_RATING
from schemas.review import PropertyStats, SourceRating, RatingBucket
from services.rating import normalize_rating


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def group_by_property(reviews: Iterable) -> Dict[str, list]:
    """Group reviews by property_id, keeping first-seen order."""
    groups: Dict[str, list] = {}
    for review in reviews:
        groups.setdefault(review.property_id, []).append(review)
    return groups


def compute_property_stats(reviews: Sequence) -> PropertyStats:
    """
    Aggregate one property's reviews.

    Averages use normalized ratings and skip unrated reviews, which still
    count towards the totals. Category averages stay on the native scale and
    divide by the number of reviews carrying that category.
    """
    if not reviews:
        raise ValueError("compute_property_stats requires at least one review")

    first = reviews[0]
    approved = sum(1 for review in reviews if review.is_approved_for_public)

    normalized_all: List[float] = []
    per_source: Dict[str, List[float]] = {source.value: [] for source in ReviewSource}
    source_counts: Dict[str, int] = {source.value: 0 for source in ReviewSource}

    category_totals: Dict[str, float] = {}
    category_review_counts: Dict[str, int] = {}

    for review in reviews:
        source = str(getattr(review.source, "value", review.source))
        source_counts[source] = source_counts.get(source, 0) + 1

        normalized = normalize_rating(source, review.rating)
        if normalized is not None:
            normalized_all.append(normalized)
            per_source.setdefault(source, []).append(normalized)

        seen_in_review = set()
        for category in review.categories:
            category_totals[category.category] = category_totals.get(category.category, 0.0) + category.rating
            seen_in_review.add(category.category)
        for name in seen_in_review:
            category_review_counts[name] = category_review_counts.get(name, 0) + 1

    source_ratings = {
        source: SourceRating(
            average_rating=_mean(per_source.get(source, [])),
            review_count=count,
            rated_count=len(per_source.get(source, [])),
        )
        for source, count in source_counts.items()
    }

    return PropertyStats(
        property_id=first.property_id,
        property_name=first.property_name,
        total_reviews=len(reviews),
        approved_reviews=approved,
        pending_reviews=len(reviews) - approved,
        average_rating=_mean(normalized_all),
        source_ratings=source_ratings,
        category_averages={
            name: total / category_review_counts[name]
            for name, total in category_totals.items()
        },
    )


def aggregate_property_stats(reviews: Iterable) -> List[PropertyStats]:
    """Statistics for every property present in ``reviews``."""
    return [compute_property_stats(group) for group in group_by_property(reviews).values()]


def rating_distribution(reviews: Iterable) -> List[RatingBucket]:
    """Count rated reviews per whole star (1-5) of their normalized rating."""
    top = int(NORMALIZED_MAX_RATING)
    counts = {star: 0 for star in range(1, top + 1)}
    for review in reviews:
        normalized = normalize_rating(review.source, review.rating)
        if normalized is None:
            continue
        star = min(max(int(math.floor(normalized)), 1), top)
        counts[star] += 1
    return [RatingBucket(rating=star, count=count) for star, count in counts.items()]


def empty_property_stats(property_id: str, property_name: str) -> PropertyStats:
    """Statistics of a property with no reviews in scope."""
    return PropertyStats(
        property_id=property_id,
        property_name=property_name,
        source_ratings={source.value: SourceRating() for source in ReviewSource},
    )

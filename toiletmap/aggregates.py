"""
Rating aggregation for toilet listings.

A listing's five rating fields are the means of the matching fields over its
non-deleted reviews, rounded half up to two decimals. A missing sub-rating counts as
zero. With no reviews every field is zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from toiletmap.db import RATING_FIELDS, DbClient, ReviewRecord, ToiletRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingAggregates:
    review_count: int = 0
    average_rating: float = 0.0
    cleanliness_rating: float = 0.0
    layout_rating: float = 0.0
    spaciousness_rating: float = 0.0
    amenities_rating: float = 0.0


def round_rating(value: float) -> float:
    """Round to two decimals with ties going up (4.125 -> 4.13)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_aggregates(reviews: Iterable[ReviewRecord]) -> RatingAggregates:
    active = [review for review in reviews if not review.is_deleted]
    if not active:
        return RatingAggregates()

    totals = dict.fromkeys(RATING_FIELDS, 0.0)
    for review in active:
        for name in RATING_FIELDS:
            totals[name] += getattr(review, name) or 0

    count = len(active)
    means = {name: round_rating(total / count) for name, total in totals.items()}
    return RatingAggregates(
        review_count=count,
        average_rating=means["overall_rating"],
        cleanliness_rating=means["cleanliness_rating"],
        layout_rating=means["layout_rating"],
        spaciousness_rating=means["spaciousness_rating"],
        amenities_rating=means["amenities_rating"],
    )


def apply_aggregates(toilet: ToiletRecord, aggregates: RatingAggregates) -> None:
    toilet.review_count = aggregates.review_count
    toilet.average_rating = aggregates.average_rating
    toilet.cleanliness_rating = aggregates.cleanliness_rating
    toilet.layout_rating = aggregates.layout_rating
    toilet.spaciousness_rating = aggregates.spaciousness_rating
    toilet.amenities_rating = aggregates.amenities_rating
    toilet.touch()


def recompute_toilet_aggregates(
    db: DbClient, toilet_id: str
) -> Optional[ToiletRecord]:
    """
    Recompute and persist the rating fields of a listing from its reviews.

    Returns the updated listing, or None when the listing does not exist.
    """
    toilet = db.get_toilet(toilet_id)
    if not toilet:
        logger.warning("Skipping aggregate recompute for missing toilet %s", toilet_id)
        return None

    aggregates = compute_aggregates(db.list_reviews(toilet_id))
    apply_aggregates(toilet, aggregates)
    db.save_toilet(toilet)
    logger.info(
        "Recomputed aggregates for toilet %s: %d reviews, average %.2f",
        toilet_id,
        aggregates.review_count,
        aggregates.average_rating,
    )
    return toilet

"""
Descriptive review statistics for display.

Pure functions only: the same input list always yields the same output,
independent of ordering. Rounding is half-up throughout, both for the
one-decimal average and for placing a rating in an integer star bucket.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Union

from mamae_review.models.review import Review, ReviewStats

STAR_VALUES = (1, 2, 3, 4, 5)

Number = Union[int, float]


def round_half_up(value: Number, places: int = 0) -> Decimal:
    """Round using half-up semantics on the decimal representation of value."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def mean_rating(ratings: List[Number]) -> float:
    """Mean of ratings rounded half-up to one decimal place; 0 for no ratings."""
    if not ratings:
        return 0.0
    # Decimal sum keeps 4.25 from drifting to 4.2499999
    total = sum((Decimal(str(r)) for r in ratings), Decimal(0))
    return float(round_half_up(total / len(ratings), 1))


def star_bucket(rating: Number) -> int:
    return int(round_half_up(rating))


def compute_stats(reviews: Iterable[Review]) -> ReviewStats:
    """
    Compute average, total and a 1-5 star histogram.

    Ratings that fall outside 1..5 after rounding are left out of the
    histogram but still count towards total and average.
    """
    ratings = [review.rating for review in reviews]

    distribution = {star: 0 for star in STAR_VALUES}
    for rating in ratings:
        bucket = star_bucket(rating)
        if bucket in distribution:
            distribution[bucket] += 1

    return ReviewStats(
        average=mean_rating(ratings),
        total=len(ratings),
        distribution=distribution,
    )

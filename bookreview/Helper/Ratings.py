"""Rating aggregates.

Averages are always computed from the full set of integer ratings with
float division. Rounding happens only in ``stars`` and ``display_average``,
which exist for presentation and are never fed back into a computation.
"""
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from bookreview.BusinessObjects.models import BookRatingSummary

MAX_STARS = 5


def average_rating(ratings: Iterable[int]) -> float:
    values = list(ratings)
    if not values:
        return 0.0
    return sum(values) / len(values)


def stars(average: float) -> int:
    """Round half up to a whole number of stars in [0, 5]."""
    return min(MAX_STARS, max(0, math.floor(average + 0.5)))


def display_average(average: float) -> str:
    """One decimal place, rounding half up."""
    return str(Decimal(average).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize(ratings: Iterable[int]) -> BookRatingSummary:
    values = list(ratings)
    average = average_rating(values)
    return BookRatingSummary(
        average_rating=average,
        review_count=len(values),
        stars=stars(average),
        average_display=display_average(average),
    )

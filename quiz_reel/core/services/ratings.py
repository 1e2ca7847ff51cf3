"""Quiz rating aggregation."""

from __future__ import annotations

import copy
from enum import Enum
import logging

from quiz_reel.constants.quiz_constants import DEFAULT_AVERAGE_RATING, MAX_RATING, MIN_RATING
from quiz_reel.core.errors import DuplicateRatingError, ValidationError
from quiz_reel.core.models import Quiz

logger = logging.getLogger(__name__)


class RatingPolicy(Enum):
    """Whether a user may rate the same quiz more than once."""

    UNLIMITED = "unlimited"
    ONE_PER_USER = "one_per_user"


def average_of(ratings: list[int]) -> float:
    if not ratings:
        return DEFAULT_AVERAGE_RATING
    return sum(ratings) / len(ratings)


def validate_rating(rating: object) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
    return rating


def add_rating(
    quiz: Quiz,
    rating: object,
    user_id: str | None = None,
    policy: RatingPolicy = RatingPolicy.UNLIMITED,
) -> Quiz:
    """Return a copy of ``quiz`` with ``rating`` appended and the mean recomputed."""
    value = validate_rating(rating)
    if policy is RatingPolicy.ONE_PER_USER:
        if not user_id:
            raise ValidationError("A user id is required to rate this quiz.")
        if user_id in quiz.rated_by:
            raise DuplicateRatingError("User has already rated this quiz.")

    updated = copy.deepcopy(quiz)
    updated.ratings.append(value)
    if user_id and user_id not in updated.rated_by:
        updated.rated_by.append(user_id)
    # Recomputed from the full list every time; no running mean.
    updated.average_rating = average_of(updated.ratings)
    logger.info("Quiz %s rated %d (average %.2f)", quiz.id, value, updated.average_rating)
    return updated

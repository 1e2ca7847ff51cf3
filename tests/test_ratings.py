import pytest

from quiz_reel.core.errors import DuplicateRatingError, ValidationError
from quiz_reel.core.services.ratings import RatingPolicy, add_rating, average_of


def test_average_is_exact_mean(quiz):
    for value in (5, 3, 4):
        quiz = add_rating(quiz, value)
        assert quiz.average_rating == sum(quiz.ratings) / len(quiz.ratings)
    assert quiz.ratings == [5, 3, 4]
    assert quiz.average_rating == 4.0


def test_average_defaults_to_zero():
    assert average_of([]) == 0.0


def test_input_quiz_is_not_modified(quiz):
    add_rating(quiz, 5)
    assert quiz.ratings == []
    assert quiz.average_rating == 0.0


@pytest.mark.parametrize("rating", [0, 6, -1, 4.5, "5", True, None])
def test_invalid_ratings_are_rejected(quiz, rating):
    with pytest.raises(ValidationError):
        add_rating(quiz, rating)


def test_unlimited_policy_allows_repeat_ratings(quiz):
    quiz = add_rating(quiz, 5, user_id="u1")
    quiz = add_rating(quiz, 1, user_id="u1")
    assert quiz.ratings == [5, 1]
    assert quiz.average_rating == 3.0


def test_one_per_user_policy_rejects_second_rating(quiz):
    quiz = add_rating(quiz, 5, user_id="u1", policy=RatingPolicy.ONE_PER_USER)
    with pytest.raises(DuplicateRatingError):
        add_rating(quiz, 4, user_id="u1", policy=RatingPolicy.ONE_PER_USER)
    quiz = add_rating(quiz, 3, user_id="u2", policy=RatingPolicy.ONE_PER_USER)
    assert quiz.ratings == [5, 3]
    assert quiz.rated_by == ["u1", "u2"]


def test_one_per_user_policy_needs_user(quiz):
    with pytest.raises(ValidationError):
        add_rating(quiz, 4, policy=RatingPolicy.ONE_PER_USER)

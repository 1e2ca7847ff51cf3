"""Scoring rules for submitted quiz answers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from quiz_reel.core.models import Question


def normalize_answer(value: object) -> frozenset[int]:
    """Turn a submitted answer into a set of option indices.

    A single index becomes a singleton set and a sequence of indices becomes a
    set, so duplicates collapse. Anything else counts as no answer.
    """
    if isinstance(value, bool):
        return frozenset()
    if isinstance(value, int):
        return frozenset((value,))
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(
            item for item in value if isinstance(item, int) and not isinstance(item, bool)
        )
    return frozenset()


def is_correct(submitted: frozenset[int], correct: frozenset[int]) -> bool:
    """An answer is correct when it is non-empty and matches the correct set exactly."""
    return bool(submitted) and submitted == correct


def evaluate(questions: Iterable[Question], answers: Mapping[str, object]) -> int:
    """Return how many questions were answered exactly right."""
    score = 0
    for question in questions:
        if question.id not in answers:
            continue
        if is_correct(normalize_answer(answers[question.id]), question.correct_answer_indices):
            score += 1
    return score

"""Per-question answer distribution bookkeeping."""

from __future__ import annotations

from collections.abc import Iterable

from quiz_reel.core.models import QuestionStat, QuizStats
from quiz_reel.core.scoring import is_correct


def question_stat_for(stats: QuizStats, question_id: str) -> QuestionStat:
    """Return the stat entry for a question, creating an empty one if needed."""
    entry = stats.question_stats.get(question_id)
    if entry is None:
        entry = QuestionStat()
        stats.question_stats[question_id] = entry
    return entry


def record_answer(
    question_stat: QuestionStat,
    submitted_indices: Iterable[int],
    correct_indices: Iterable[int],
) -> bool:
    """Count one attempt at a question and return whether it was correct."""
    submitted = frozenset(submitted_indices)
    question_stat.attempts += 1
    for index in submitted:
        question_stat.answers[index] = question_stat.answers.get(index, 0) + 1

    answered_correctly = is_correct(submitted, frozenset(correct_indices))
    if answered_correctly:
        question_stat.correct += 1
    return answered_correctly

"""Play gate and quiz-level aggregate updates for finished attempts."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
import logging

from quiz_reel.core.errors import ValidationError
from quiz_reel.core.models import Quiz
from quiz_reel.core.scoring import normalize_answer
from quiz_reel.core.services.question_stats import question_stat_for, record_answer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PlayOutcome:
    """Quiz after a play was applied, and whether the user had played before."""

    quiz: Quiz
    already_recorded: bool
    correct_answers: int = 0


def record_play(quiz: Quiz, user_id: str, answers: Mapping[str, object]) -> PlayOutcome:
    """Count the first play of ``user_id`` on ``quiz``.

    The input quiz is never modified. Updates are applied to a copy which is
    returned in the outcome, so a failure half way leaves nothing behind.
    Repeat plays return the quiz unchanged with ``already_recorded`` set.
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("A user id is required to record a play.")
    if not isinstance(answers, Mapping):
        raise ValidationError("Answers must map question ids to option indices.")

    if quiz.has_played(user_id):
        logger.debug("User %s already played quiz %s; stats unchanged", user_id, quiz.id)
        return PlayOutcome(quiz=quiz, already_recorded=True)

    updated = copy.deepcopy(quiz)
    updated.played_by.append(user_id)
    updated.stats.total_plays += 1

    correct_in_play = 0
    for question_id, user_answer in answers.items():
        question = updated.find_question(question_id)
        if question is None:
            logger.warning("Skipping answer for unknown question %s in quiz %s", question_id, quiz.id)
            continue
        stat = question_stat_for(updated.stats, question_id)
        if record_answer(stat, normalize_answer(user_answer), question.correct_answer_indices):
            correct_in_play += 1

    updated.stats.total_correct_answers += correct_in_play
    return PlayOutcome(quiz=updated, already_recorded=False, correct_answers=correct_in_play)

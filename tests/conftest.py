from __future__ import annotations

import pytest

from quiz_reel.core.models import Question, Quiz, QuizDraft, QuizStats
from quiz_reel.core.quiz_manager import QuizManager


def make_questions() -> list[Question]:
    return [
        Question(id="q1", prompt="Who directed *Alien*?", options=["Scott", "Cameron", "Fincher"],
                 correct_answer_indices=frozenset({0})),
        Question(id="q2", prompt="Which films are by Nolan?", options=["Heat", "Memento", "Tenet", "Jaws"],
                 correct_answer_indices=frozenset({1, 2})),
    ]


@pytest.fixture
def questions() -> list[Question]:
    return make_questions()


@pytest.fixture
def quiz(questions) -> Quiz:
    return Quiz(
        id="quiz-1",
        title="Directors",
        category="movies",
        questions=questions,
        creator_id="author",
        stats=QuizStats.for_questions(questions),
    )


@pytest.fixture
def draft() -> QuizDraft:
    return QuizDraft(title="Directors", category="movies", questions=make_questions())


@pytest.fixture
def manager() -> QuizManager:
    return QuizManager()

"""Service for storing quizzes and serializing updates to each one."""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock
from typing import TypeVar
from uuid import uuid4

from quiz_reel.constants.quiz_constants import DEFAULT_AVERAGE_RATING, MIN_OPTIONS_PER_QUESTION
from quiz_reel.core.errors import NotFoundError, ValidationError
from quiz_reel.core.models import Question, Quiz, QuizDraft, QuizStats

T = TypeVar("T")


class QuizRepository:
    """Manages the lifecycle and storage of quizzes.

    Every change to a stored quiz goes through ``transact``, which holds a
    lock for that quiz id while the change is built and only stores the
    result once it is complete.
    """

    def __init__(self) -> None:
        self._quizzes: dict[str, Quiz] = {}
        self._quiz_locks: dict[str, Lock] = {}
        self._registry_lock = Lock()

    def create_quiz(self, draft: QuizDraft, creator_id: str) -> Quiz:
        if not creator_id or not creator_id.strip():
            raise ValidationError("A creator id is required to create a quiz.")
        prepared = self._prepare_draft(draft)
        quiz = Quiz(
            id=uuid4().hex,
            title=prepared.title,
            category=prepared.category,
            questions=prepared.questions,
            creator_id=creator_id,
            is_private=prepared.is_private,
            time_limit=prepared.time_limit,
            play_until_first_mistake=prepared.play_until_first_mistake,
            stats=QuizStats.for_questions(prepared.questions),
        )
        with self._registry_lock:
            self._quizzes[quiz.id] = quiz
            self._quiz_locks[quiz.id] = Lock()
        return quiz

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._registry_lock:
            quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise NotFoundError(f"Quiz {quiz_id} not found.")
        return quiz

    def list_public_quizzes(self) -> list[Quiz]:
        """Return non-private quizzes, newest first."""
        with self._registry_lock:
            # Dict order is creation order; edits replace values in place.
            return [quiz for quiz in reversed(self._quizzes.values()) if not quiz.is_private]

    def count_quizzes_by_creator(self, creator_id: str) -> int:
        with self._registry_lock:
            return sum(1 for quiz in self._quizzes.values() if quiz.creator_id == creator_id)

    def update_quiz(self, quiz_id: str, draft: QuizDraft) -> Quiz:
        """Replace the quiz content; editing wipes stats, ratings and plays."""
        prepared = self._prepare_draft(draft)

        def reset(current: Quiz) -> tuple[Quiz, Quiz]:
            updated = Quiz(
                id=current.id,
                title=prepared.title,
                category=prepared.category,
                questions=prepared.questions,
                creator_id=current.creator_id,
                is_private=prepared.is_private,
                time_limit=prepared.time_limit,
                play_until_first_mistake=prepared.play_until_first_mistake,
                stats=QuizStats.for_questions(prepared.questions),
                ratings=[],
                average_rating=DEFAULT_AVERAGE_RATING,
                played_by=[],
                rated_by=[],
                created_at=current.created_at,
            )
            return updated, updated

        return self.transact(quiz_id, reset)

    def delete_quiz(self, quiz_id: str) -> None:
        lock = self._lock_for(quiz_id)
        with lock:
            with self._registry_lock:
                self._quizzes.pop(quiz_id, None)
                self._quiz_locks.pop(quiz_id, None)

    def transact(self, quiz_id: str, mutation: Callable[[Quiz], tuple[Quiz, T]]) -> T:
        """Run a read-modify-write on one quiz under that quiz's lock.

        ``mutation`` receives the stored quiz and returns the quiz to store
        plus a value handed back to the caller. If it raises, nothing is
        stored.
        """
        with self._lock_for(quiz_id):
            current = self.get_quiz(quiz_id)
            updated, value = mutation(current)
            if updated is not current:
                with self._registry_lock:
                    self._quizzes[quiz_id] = updated
            return value

    def _lock_for(self, quiz_id: str) -> Lock:
        with self._registry_lock:
            lock = self._quiz_locks.get(quiz_id)
        if lock is None:
            raise NotFoundError(f"Quiz {quiz_id} not found.")
        return lock

    def _prepare_draft(self, draft: QuizDraft) -> QuizDraft:
        """Validate and normalize quiz content before storage."""
        title = draft.title.strip()
        if not title:
            raise ValidationError("Quiz title must not be empty.")
        if not draft.questions:
            raise ValidationError("Quiz must contain at least one question.")

        questions = [self._prepare_question(q) for q in draft.questions]
        ids = [q.id for q in questions]
        if len(set(ids)) != len(ids):
            raise ValidationError("Question ids must be unique within a quiz.")

        return QuizDraft(
            title=title,
            category=draft.category.strip(),
            questions=questions,
            is_private=bool(draft.is_private),
            time_limit=self._normalize_time_limit(draft.time_limit),
            play_until_first_mistake=bool(draft.play_until_first_mistake),
        )

    def _prepare_question(self, question: Question) -> Question:
        options = self._validate_options(question.options)
        cleaned_text = question.prompt.strip()
        if not cleaned_text:
            raise ValidationError("Question text must not be empty.")

        correct = frozenset(question.correct_answer_indices)
        if not correct:
            raise ValidationError("Each question needs at least one correct option.")
        if any(not 0 <= index < len(options) for index in correct):
            raise ValidationError(
                f"Correct option indices must be between 0 and {len(options) - 1}."
            )

        return Question(
            id=question.id.strip() or uuid4().hex,
            prompt=cleaned_text,
            options=options,
            correct_answer_indices=correct,
            media_url=question.media_url or None,
        )

    @staticmethod
    def _validate_options(options: list[str]) -> list[str]:
        if len(options) < MIN_OPTIONS_PER_QUESTION:
            raise ValidationError(
                f"Each question must have at least {MIN_OPTIONS_PER_QUESTION} options."
            )
        cleaned = [option.strip() for option in options]
        if any(not option for option in cleaned):
            raise ValidationError("Option text cannot be empty.")
        return cleaned

    @staticmethod
    def _normalize_time_limit(time_limit: int | None) -> int | None:
        if time_limit is None:
            return None
        if isinstance(time_limit, bool) or not isinstance(time_limit, int):
            raise ValidationError("Time limit must be provided as an integer number of seconds.")
        if time_limit <= 0:
            raise ValidationError("Time limit must be a positive integer.")
        return time_limit

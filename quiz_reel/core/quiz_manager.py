"""Business logic tying quizzes, plays, ratings and mini-games together."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
import re
from threading import Lock

from quiz_reel.core.errors import ValidationError
from quiz_reel.core.models import LeaderboardEntry, Quiz, QuizDraft, UserPlayRecord
from quiz_reel.core.scoring import evaluate
from quiz_reel.core.services.game_store import GameAggregateStore, GameResultService, GameSnapshot
from quiz_reel.core.services.play_history import PlayHistoryLedger
from quiz_reel.core.services.play_recorder import record_play
from quiz_reel.core.services.quiz_repository import QuizRepository
from quiz_reel.core.services.ratings import RatingPolicy, add_rating

logger = logging.getLogger(__name__)

_FILE_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(slots=True)
class FinishResult:
    """What a caller gets back once an attempt has been recorded."""

    quiz: Quiz
    already_recorded: bool
    score: int
    total_questions: int
    record: UserPlayRecord


@dataclass(slots=True)
class UserProfile:
    play_history: list[UserPlayRecord]
    created_quizzes_count: int
    game_stats: dict[str, dict[str, object]]


class QuizManager:
    """Facade for quiz services: Repository, play recording, ratings, games and history."""

    def __init__(
        self,
        repository: QuizRepository | None = None,
        game_store: GameAggregateStore | None = None,
        rating_policy: RatingPolicy = RatingPolicy.UNLIMITED,
        history_dir: Path | None = None,
    ) -> None:
        self._repository = repository or QuizRepository()
        self._games = GameResultService(game_store)
        self._rating_policy = rating_policy
        self._history_dir = history_dir
        self._ledgers: dict[str, PlayHistoryLedger] = {}
        self._ledger_lock = Lock()

    # --- Quiz Repository Delegation ---

    def create_quiz(self, draft: QuizDraft, creator_id: str) -> Quiz:
        quiz = self._repository.create_quiz(draft, creator_id)
        logger.info("Quiz %s created by %s", quiz.id, creator_id)
        return quiz

    def get_quiz(self, quiz_id: str) -> Quiz:
        return self._repository.get_quiz(quiz_id)

    def list_public_quizzes(self) -> list[Quiz]:
        return self._repository.list_public_quizzes()

    def update_quiz(self, quiz_id: str, draft: QuizDraft) -> Quiz:
        quiz = self._repository.update_quiz(quiz_id, draft)
        logger.info("Quiz %s edited; stats, ratings and plays reset", quiz_id)
        return quiz

    def delete_quiz(self, quiz_id: str) -> None:
        self._repository.delete_quiz(quiz_id)
        logger.info("Quiz %s deleted", quiz_id)

    # --- Plays ---

    def finish_quiz(self, quiz_id: str, user_id: str, answers: Mapping[str, object]) -> FinishResult:
        """Record a finished attempt and append it to the user's history.

        Only the first attempt per user changes the quiz aggregates; every
        attempt gets a history entry.
        """
        if not isinstance(answers, Mapping):
            raise ValidationError("Answers must map question ids to option indices.")
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("A user id is required to record a play.")
        ledger = self._open_ledger(user_id)

        def play(current: Quiz) -> tuple[Quiz, tuple[Quiz, Quiz, bool]]:
            outcome = record_play(current, user_id, answers)
            return outcome.quiz, (current, outcome.quiz, outcome.already_recorded)

        played_quiz, stored_quiz, already_recorded = self._repository.transact(quiz_id, play)
        if already_recorded:
            logger.info("User %s replayed quiz %s; aggregates unchanged", user_id, quiz_id)
        else:
            logger.info("Counted play of quiz %s by %s", quiz_id, user_id)

        record = UserPlayRecord(
            quiz_id=played_quiz.id,
            quiz_title=played_quiz.title,
            category=played_quiz.category,
            score=evaluate(played_quiz.questions, answers),
            total_questions=len(played_quiz.questions),
        )
        self._register_ledger(user_id, ledger).append(record)
        return FinishResult(
            quiz=stored_quiz,
            already_recorded=already_recorded,
            score=record.score,
            total_questions=record.total_questions,
            record=record,
        )

    # --- Ratings ---

    def rate_quiz(self, quiz_id: str, rating: object, user_id: str | None = None) -> Quiz:
        def rate(current: Quiz) -> tuple[Quiz, Quiz]:
            updated = add_rating(current, rating, user_id=user_id, policy=self._rating_policy)
            return updated, updated

        return self._repository.transact(quiz_id, rate)

    # --- Mini-games ---

    def report_game_result(
        self, kind: object, genre: object, user_id: str, result: object
    ) -> GameSnapshot:
        return self._games.update_game_result(kind, genre, user_id, result)

    def get_game_snapshot(self) -> GameSnapshot:
        return self._games.snapshot()

    def get_leaderboard(self, kind: object, genre: object) -> list[LeaderboardEntry]:
        return self._games.get_leaderboard(kind, genre)

    # --- History & Profile ---

    def _ledger_path(self, user_id: str) -> Path | None:
        if self._history_dir is None:
            return None
        if not _FILE_SAFE_ID.match(user_id):
            raise ValidationError(f"User id {user_id!r} cannot name a history file.")
        return self._history_dir / f"{user_id}.json"

    def _open_ledger(self, user_id: str) -> PlayHistoryLedger:
        """Return the user's ledger, loading it from disk without registering it."""
        with self._ledger_lock:
            ledger = self._ledgers.get(user_id)
        if ledger is None:
            ledger = PlayHistoryLedger(self._ledger_path(user_id))
            ledger.load()
        return ledger

    def _register_ledger(self, user_id: str, ledger: PlayHistoryLedger) -> PlayHistoryLedger:
        with self._ledger_lock:
            return self._ledgers.setdefault(user_id, ledger)

    def get_play_history(self, user_id: str) -> list[UserPlayRecord]:
        return self._open_ledger(user_id).records()

    def tracked_user_count(self) -> int:
        """Number of users whose ledgers are held in memory."""
        with self._ledger_lock:
            return len(self._ledgers)

    def get_profile(self, user_id: str) -> UserProfile:
        return UserProfile(
            play_history=self.get_play_history(user_id),
            created_quizzes_count=self._repository.count_quizzes_by_creator(user_id),
            game_stats=self._games.personal_stats(user_id),
        )

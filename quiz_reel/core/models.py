"""Domain models for QuizReel quizzes and mini-games."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from quiz_reel.constants.quiz_constants import DEFAULT_AVERAGE_RATING


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Question:
    """Multiple-choice question with one or more correct options."""

    id: str
    prompt: str
    options: list[str]
    correct_answer_indices: frozenset[int]
    media_url: str | None = None


@dataclass(slots=True)
class QuestionStat:
    """Answer distribution collected for a single question."""

    attempts: int = 0
    correct: int = 0
    answers: dict[int, int] = field(default_factory=dict)


@dataclass(slots=True)
class QuizStats:
    """Aggregate counters for counted plays of a quiz."""

    total_plays: int = 0
    total_correct_answers: int = 0
    question_stats: dict[str, QuestionStat] = field(default_factory=dict)

    @classmethod
    def for_questions(cls, questions: list[Question]) -> QuizStats:
        """Return zeroed stats with one entry per question."""
        return cls(question_stats={question.id: QuestionStat() for question in questions})


@dataclass(slots=True)
class QuizDraft:
    """Author-supplied quiz content, before it becomes a stored quiz."""

    title: str
    category: str
    questions: list[Question]
    is_private: bool = False
    time_limit: int | None = None
    play_until_first_mistake: bool = False


@dataclass(slots=True)
class Quiz:
    """A stored quiz together with its play and rating aggregates."""

    id: str
    title: str
    category: str
    questions: list[Question]
    creator_id: str
    is_private: bool = False
    time_limit: int | None = None
    play_until_first_mistake: bool = False
    stats: QuizStats = field(default_factory=QuizStats)
    ratings: list[int] = field(default_factory=list)
    average_rating: float = DEFAULT_AVERAGE_RATING
    played_by: list[str] = field(default_factory=list)
    rated_by: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)

    def find_question(self, question_id: str) -> Question | None:
        return next((q for q in self.questions if q.id == question_id), None)

    def has_played(self, user_id: str) -> bool:
        return user_id in self.played_by


@dataclass(slots=True, frozen=True)
class UserPlayRecord:
    """Snapshot of one finished quiz attempt, kept in the play-history ledger."""

    quiz_id: str
    quiz_title: str
    category: str
    score: int
    total_questions: int
    played_at: datetime = field(default_factory=_utcnow)


class RecordShape(Enum):
    """How a mini-game reports its result and stores its best record."""

    SCORE = "score"
    RUN = "run"


class GameKind(str, Enum):
    """Mini-games that report a result when a round ends."""

    MOVIE_QUIZ = "movie_quiz"
    SERIES_QUIZ = "series_quiz"
    MOVIE_RATING_GAME = "movie_rating_game"
    SERIES_SEASON_RATING_GAME = "series_season_rating_game"
    DIRECTOR_QUIZ = "director_quiz"
    YEAR_QUIZ = "year_quiz"
    ACTOR_QUIZ = "actor_quiz"
    SERIES_ACTOR_QUIZ = "series_actor_quiz"
    DESCRIPTION_QUIZ = "description_quiz"
    SERIES_DESCRIPTION_QUIZ = "series_description_quiz"

    @property
    def record_shape(self) -> RecordShape:
        if self in (GameKind.DESCRIPTION_QUIZ, GameKind.SERIES_DESCRIPTION_QUIZ):
            return RecordShape.RUN
        return RecordShape.SCORE


@dataclass(slots=True, frozen=True)
class ScoreResult:
    """Result of a scalar-scored game round."""

    score: int


@dataclass(slots=True, frozen=True)
class RunResult:
    """Result of a description-style game: rounds survived and mean accuracy."""

    rounds: int
    avg_percentage: float


@dataclass(slots=True, frozen=True)
class HighScore:
    """Best scalar score for a game and genre."""

    score: int = 0


@dataclass(slots=True, frozen=True)
class RunRecord:
    """Best run for a description-style game and genre."""

    rounds: int = 0
    avg_percentage: float = 0.0


@dataclass(slots=True, frozen=True)
class LeaderboardEntry:
    """A user's personal best on one leaderboard."""

    user_id: str
    score: int


@dataclass(slots=True, frozen=True)
class PersonalBest:
    """One user's best record for a game and genre."""

    user_id: str
    record: HighScore | RunRecord


@dataclass(slots=True, frozen=True)
class GenreAggregate:
    """Everything stored for one (game kind, genre) slot."""

    record: HighScore | RunRecord | None = None
    leaderboard: tuple[LeaderboardEntry, ...] = ()
    personal_bests: tuple[PersonalBest, ...] = ()

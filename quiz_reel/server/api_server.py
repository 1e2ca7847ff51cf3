"""FastAPI server exposing quizzes, plays, ratings and mini-game results."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Response
from pydantic import BaseModel, Field, StrictInt
import uvicorn

from quiz_reel.constants.about import APP_NAME, APP_VERSION
from quiz_reel.constants.network_constants import API_PREFIX, DEFAULT_HOST, DEFAULT_PORT
from quiz_reel.core.errors import DuplicateRatingError, NotFoundError, TransportError, ValidationError
from quiz_reel.core.markdown_renderer import renderer
from quiz_reel.core.models import Question, QuestionStat, Quiz, QuizDraft, UserPlayRecord
from quiz_reel.core.quiz_manager import QuizManager
from quiz_reel.core.services.game_store import GameSnapshot
from quiz_reel.core.services.play_history import record_to_dict

logger = logging.getLogger(__name__)


class QuestionPayload(BaseModel):
    """Question as submitted by an author."""

    id: str = ""
    prompt: str
    options: list[str]
    correct_answer_indices: list[int]
    media_url: str | None = None


class QuizPayload(BaseModel):
    """Editable quiz content."""

    title: str
    category: str = ""
    questions: list[QuestionPayload] = Field(default_factory=list)
    is_private: bool = False
    time_limit: int | None = None
    play_until_first_mistake: bool = False

    def to_draft(self) -> QuizDraft:
        return QuizDraft(
            title=self.title,
            category=self.category,
            questions=[
                Question(
                    id=q.id,
                    prompt=q.prompt,
                    options=list(q.options),
                    correct_answer_indices=frozenset(q.correct_answer_indices),
                    media_url=q.media_url,
                )
                for q in self.questions
            ],
            is_private=self.is_private,
            time_limit=self.time_limit,
            play_until_first_mistake=self.play_until_first_mistake,
        )


class CreateQuizPayload(QuizPayload):
    creator_id: str


class PlayPayload(BaseModel):
    """Answers for a finished attempt, keyed by question id."""

    user_id: str
    answers: dict[str, Any] = Field(default_factory=dict)


class RatingPayload(BaseModel):
    rating: StrictInt
    user_id: str | None = None


class GameResultPayload(BaseModel):
    """Result of a mini-game round: a score, or rounds plus average percentage."""

    user_id: str
    score: StrictInt | None = None
    rounds: StrictInt | None = None
    avg_percentage: float | None = None

    def to_result(self) -> object:
        if self.score is not None:
            return self.score
        return {"rounds": self.rounds, "avg_percentage": self.avg_percentage}


def _question_to_dict(question: Question) -> dict[str, object]:
    return {
        "id": question.id,
        "prompt": question.prompt,
        "prompt_html": renderer.render_fragment(question.prompt),
        "options": list(question.options),
        "correct_answer_indices": sorted(question.correct_answer_indices),
        "media_url": question.media_url,
    }


def _question_stat_to_dict(stat: QuestionStat) -> dict[str, object]:
    return {
        "attempts": stat.attempts,
        "correct": stat.correct,
        "answers": {str(index): count for index, count in sorted(stat.answers.items())},
    }


def _quiz_to_dict(quiz: Quiz) -> dict[str, object]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "category": quiz.category,
        "questions": [_question_to_dict(q) for q in quiz.questions],
        "creator_id": quiz.creator_id,
        "is_private": quiz.is_private,
        "time_limit": quiz.time_limit,
        "play_until_first_mistake": quiz.play_until_first_mistake,
        "stats": {
            "total_plays": quiz.stats.total_plays,
            "total_correct_answers": quiz.stats.total_correct_answers,
            "question_stats": {
                question_id: _question_stat_to_dict(stat)
                for question_id, stat in quiz.stats.question_stats.items()
            },
        },
        "ratings": list(quiz.ratings),
        "average_rating": quiz.average_rating,
        "played_by": list(quiz.played_by),
        "created_at": quiz.created_at.isoformat(),
    }


def _snapshot_to_dict(snapshot: GameSnapshot) -> dict[str, object]:
    return {"game_stats": snapshot.game_stats, "leaderboards": snapshot.leaderboards}


def _history_to_list(records: list[UserPlayRecord]) -> list[dict[str, object]]:
    return [record_to_dict(record) for record in records]


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except DuplicateRatingError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TransportError as exc:
        logger.warning("Storage unavailable: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)
    router = APIRouter(prefix=API_PREFIX)

    @router.get("/quizzes")
    def list_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [_quiz_to_dict(quiz) for quiz in manager.list_public_quizzes()]

    @router.get("/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        with _translate_errors():
            return _quiz_to_dict(manager.get_quiz(quiz_id))

    @router.post("/quizzes", status_code=201)
    def create_quiz(
        payload: CreateQuizPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            quiz = manager.create_quiz(payload.to_draft(), creator_id=payload.creator_id)
        return _quiz_to_dict(quiz)

    @router.put("/quizzes/{quiz_id}")
    def update_quiz(
        quiz_id: str,
        payload: QuizPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            return _quiz_to_dict(manager.update_quiz(quiz_id, payload.to_draft()))

    @router.delete("/quizzes/{quiz_id}", status_code=204)
    def delete_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        with _translate_errors():
            manager.delete_quiz(quiz_id)
        return Response(status_code=204)

    @router.post("/quizzes/{quiz_id}/play")
    def play_quiz(
        quiz_id: str,
        payload: PlayPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            result = manager.finish_quiz(quiz_id, payload.user_id, payload.answers)
        return {
            "quiz": _quiz_to_dict(result.quiz),
            "already_recorded": result.already_recorded,
            "score": result.score,
            "total_questions": result.total_questions,
        }

    @router.post("/quizzes/{quiz_id}/rate")
    def rate_quiz(
        quiz_id: str,
        payload: RatingPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            quiz = manager.rate_quiz(quiz_id, payload.rating, user_id=payload.user_id)
        return _quiz_to_dict(quiz)

    @router.post("/games/{kind}/{genre}/results")
    def report_game_result(
        kind: str,
        genre: str,
        payload: GameResultPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            snapshot = manager.report_game_result(kind, genre, payload.user_id, payload.to_result())
        return _snapshot_to_dict(snapshot)

    @router.get("/games/stats")
    def get_game_stats(manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return manager.get_game_snapshot().game_stats

    @router.get("/games/leaderboards")
    def get_leaderboards(manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return manager.get_game_snapshot().leaderboards

    @router.get("/games/{kind}/{genre}/leaderboard")
    def get_leaderboard(
        kind: str,
        genre: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        with _translate_errors():
            entries = manager.get_leaderboard(kind, genre)
        return [{"user_id": entry.user_id, "score": entry.score} for entry in entries]

    @router.get("/users/{user_id}/history")
    def get_history(user_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        with _translate_errors():
            records = manager.get_play_history(user_id)
        return _history_to_list(records)

    @router.get("/users/{user_id}/profile")
    def get_profile(user_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        with _translate_errors():
            profile = manager.get_profile(user_id)
        return {
            "play_history": _history_to_list(profile.play_history),
            "created_quizzes_count": profile.created_quizzes_count,
            "game_stats": profile.game_stats,
        }

    app.include_router(router)
    return app


def run_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API with uvicorn until interrupted."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()

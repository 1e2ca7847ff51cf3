"""High-score and leaderboard rules for the movie and TV mini-games.

Everything here is a pure function over immutable values, so the same rules
can run wherever an aggregate needs updating.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import math
import re

from quiz_reel.core.errors import ValidationError
from quiz_reel.core.models import (
    GameKind,
    GenreAggregate,
    HighScore,
    LeaderboardEntry,
    PersonalBest,
    RecordShape,
    RunRecord,
    RunResult,
    ScoreResult,
)

_GENRE_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

GameResult = ScoreResult | RunResult


def parse_game_kind(raw: object) -> GameKind:
    try:
        return GameKind(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown game kind: {raw!r}.") from exc


def parse_genre(raw: object) -> str:
    if not isinstance(raw, str) or not _GENRE_PATTERN.match(raw):
        raise ValidationError(f"Malformed genre: {raw!r}.")
    return raw


def _whole_number(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be a whole number.")
    if value < 0:
        raise ValidationError(f"{name} must not be negative.")
    return value


def parse_game_result(kind: GameKind, raw: object) -> GameResult:
    """Resolve a raw result into the variant the game kind reports.

    Scalar games report a plain score; description-style games report a
    mapping with ``rounds`` and ``avg_percentage``.
    """
    if isinstance(raw, (ScoreResult, RunResult)):
        raw_shape = RecordShape.SCORE if isinstance(raw, ScoreResult) else RecordShape.RUN
        if raw_shape is not kind.record_shape:
            raise ValidationError(f"{kind.value} does not report {raw_shape.value} results.")
        return raw

    if kind.record_shape is RecordShape.SCORE:
        return ScoreResult(score=_whole_number(raw, "Score"))

    if not isinstance(raw, Mapping):
        raise ValidationError(f"{kind.value} results need rounds and avg_percentage.")
    rounds = _whole_number(raw.get("rounds"), "Rounds")
    avg = raw.get("avg_percentage")
    if isinstance(avg, bool) or not isinstance(avg, (int, float)) or not math.isfinite(avg):
        raise ValidationError("avg_percentage must be a number.")
    if not 0 <= avg <= 100:
        raise ValidationError("avg_percentage must be between 0 and 100.")
    return RunResult(rounds=rounds, avg_percentage=float(avg))


def update_high_score(existing: int, candidate: int) -> int:
    """Keep the higher score; a tie keeps the stored one."""
    return candidate if candidate > existing else existing


def update_run_record(existing: RunRecord, candidate: RunRecord) -> RunRecord:
    """A run replaces the record only by surviving strictly more rounds."""
    return candidate if candidate.rounds > existing.rounds else existing


def admit(
    board: Iterable[LeaderboardEntry], user_id: str, score: int
) -> tuple[LeaderboardEntry, ...]:
    """Fold a score into a leaderboard of personal bests, sorted high to low."""
    entries = list(board)
    if score <= 0:
        return tuple(entries)

    position = next((i for i, entry in enumerate(entries) if entry.user_id == user_id), -1)
    if position >= 0:
        if score > entries[position].score:
            entries[position] = LeaderboardEntry(user_id=user_id, score=score)
    else:
        entries.append(LeaderboardEntry(user_id=user_id, score=score))

    # sorted() is stable, so tied scores keep their previous order.
    return tuple(sorted(entries, key=lambda entry: -entry.score))


def personal_best(aggregate: GenreAggregate, user_id: str) -> HighScore | RunRecord | None:
    return next(
        (best.record for best in aggregate.personal_bests if best.user_id == user_id), None
    )


def _with_personal_best(
    bests: tuple[PersonalBest, ...], user_id: str, record: HighScore | RunRecord
) -> tuple[PersonalBest, ...]:
    others = tuple(best for best in bests if best.user_id != user_id)
    return (*others, PersonalBest(user_id=user_id, record=record))


def apply_game_result(
    aggregate: GenreAggregate, user_id: str, result: GameResult
) -> GenreAggregate:
    """Return the slot after one finished round.

    The slot keeps its overall best record, the leaderboard, and each
    user's own best. All three follow the same replacement rules.
    """
    mine = personal_best(aggregate, user_id)

    if isinstance(result, RunResult):
        candidate = RunRecord(rounds=result.rounds, avg_percentage=result.avg_percentage)
        current = aggregate.record if isinstance(aggregate.record, RunRecord) else RunRecord()
        best = update_run_record(current, candidate)
        my_current = mine if isinstance(mine, RunRecord) else RunRecord()
        my_best = update_run_record(my_current, candidate)
        if best is current and my_best is my_current:
            return aggregate
        return GenreAggregate(
            record=aggregate.record if best is current else best,
            leaderboard=aggregate.leaderboard,
            personal_bests=(
                aggregate.personal_bests
                if my_best is my_current
                else _with_personal_best(aggregate.personal_bests, user_id, my_best)
            ),
        )

    current_score = aggregate.record.score if isinstance(aggregate.record, HighScore) else 0
    best_score = update_high_score(current_score, result.score)
    record = aggregate.record
    if best_score != current_score:
        record = HighScore(score=best_score)

    my_score = mine.score if isinstance(mine, HighScore) else 0
    personal_bests = aggregate.personal_bests
    if update_high_score(my_score, result.score) != my_score:
        personal_bests = _with_personal_best(personal_bests, user_id, HighScore(score=result.score))

    # Zero scores never reach the board.
    leaderboard = admit(aggregate.leaderboard, user_id, result.score)
    return GenreAggregate(record=record, leaderboard=leaderboard, personal_bests=personal_bests)


def record_to_dict(record: HighScore | RunRecord) -> object:
    if isinstance(record, RunRecord):
        return {"rounds": record.rounds, "avg_percentage": record.avg_percentage}
    return record.score

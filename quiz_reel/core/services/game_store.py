"""Process-wide store for mini-game high scores and leaderboards."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from threading import Lock

from quiz_reel.core.errors import ValidationError
from quiz_reel.core.models import GameKind, GenreAggregate, LeaderboardEntry
from quiz_reel.core.services.game_records import (
    apply_game_result,
    parse_game_kind,
    parse_game_result,
    parse_genre,
    personal_best,
    record_to_dict,
)

logger = logging.getLogger(__name__)

_Key = tuple[GameKind, str]


@dataclass(slots=True)
class GameSnapshot:
    """Read-only view of every game slot, in the shape clients consume."""

    game_stats: dict[str, dict[str, object]]
    leaderboards: dict[str, dict[str, list[dict[str, object]]]]


class GameAggregateStore:
    """Holds one ``GenreAggregate`` per (game kind, genre) with atomic per-key updates."""

    def __init__(self) -> None:
        self._slots: dict[_Key, GenreAggregate] = {}
        self._key_locks: dict[_Key, Lock] = {}
        self._registry_lock = Lock()

    def _lock_for(self, key: _Key) -> Lock:
        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = Lock()
                self._key_locks[key] = lock
            return lock

    def get(self, kind: GameKind, genre: str) -> GenreAggregate:
        with self._registry_lock:
            return self._slots.get((kind, genre), GenreAggregate())

    def update(
        self,
        kind: GameKind,
        genre: str,
        reducer: Callable[[GenreAggregate], GenreAggregate],
    ) -> GenreAggregate:
        """Apply ``reducer`` to one slot while holding that slot's lock."""
        key = (kind, genre)
        with self._lock_for(key):
            current = self.get(kind, genre)
            updated = reducer(current)
            if updated is not current:
                with self._registry_lock:
                    self._slots[key] = updated
            return updated

    def items(self) -> list[tuple[_Key, GenreAggregate]]:
        with self._registry_lock:
            return list(self._slots.items())

    def snapshot(self) -> GameSnapshot:
        game_stats: dict[str, dict[str, object]] = {kind.value: {} for kind in GameKind}
        leaderboards: dict[str, dict[str, list[dict[str, object]]]] = {
            kind.value: {} for kind in GameKind
        }
        for (kind, genre), aggregate in self.items():
            if aggregate.record is not None:
                game_stats[kind.value][genre] = record_to_dict(aggregate.record)
            if aggregate.leaderboard:
                leaderboards[kind.value][genre] = [
                    {"user_id": entry.user_id, "score": entry.score}
                    for entry in aggregate.leaderboard
                ]
        return GameSnapshot(game_stats=game_stats, leaderboards=leaderboards)

    def personal_stats(self, user_id: str) -> dict[str, dict[str, object]]:
        """Return one user's own best record per game kind and genre."""
        stats: dict[str, dict[str, object]] = {kind.value: {} for kind in GameKind}
        for (kind, genre), aggregate in self.items():
            record = personal_best(aggregate, user_id)
            if record is not None:
                stats[kind.value][genre] = record_to_dict(record)
        return stats


class GameResultService:
    """Applies finished mini-game rounds to an injected aggregate store."""

    def __init__(self, store: GameAggregateStore | None = None) -> None:
        self._store = store or GameAggregateStore()

    @property
    def store(self) -> GameAggregateStore:
        return self._store

    def update_game_result(
        self, kind: object, genre: object, user_id: str, result: object
    ) -> GameSnapshot:
        """Validate one round result and fold it into the (kind, genre) slot."""
        game_kind = parse_game_kind(kind)
        game_genre = parse_genre(genre)
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("A user id is required to report a game result.")
        parsed = parse_game_result(game_kind, result)

        def reducer(aggregate: GenreAggregate) -> GenreAggregate:
            updated = apply_game_result(aggregate, user_id, parsed)
            if updated.record is not None and updated.record != aggregate.record:
                logger.info(
                    "New best for %s/%s by %s: %s",
                    game_kind.value,
                    game_genre,
                    user_id,
                    record_to_dict(updated.record),
                )
            return updated

        self._store.update(game_kind, game_genre, reducer)
        return self._store.snapshot()

    def get_leaderboard(self, kind: object, genre: object) -> list[LeaderboardEntry]:
        game_kind = parse_game_kind(kind)
        game_genre = parse_genre(genre)
        return list(self._store.get(game_kind, game_genre).leaderboard)

    def snapshot(self) -> GameSnapshot:
        return self._store.snapshot()

    def personal_stats(self, user_id: str) -> dict[str, dict[str, object]]:
        return self._store.personal_stats(user_id)

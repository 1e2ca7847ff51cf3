"""Append-only history of finished quiz attempts."""

from __future__ import annotations

from datetime import datetime
import json
from pathlib import Path
from threading import Lock

from quiz_reel.core.errors import TransportError
from quiz_reel.core.models import UserPlayRecord


class PlayHistoryLedger:
    """Most-recent-first list of play records, optionally backed by a JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._records: list[UserPlayRecord] = []
        self._lock = Lock()

    def append(self, record: UserPlayRecord) -> None:
        with self._lock:
            updated = [record, *self._records]
            if self._path is not None:
                self._write(updated)
            self._records = updated

    def records(self) -> list[UserPlayRecord]:
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def load(self) -> None:
        """Replace in-memory records with the contents of the backing file."""
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise TypeError("play history must be a JSON list")
            records = [_record_from_dict(item) for item in raw]
        except (OSError, KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"Unable to read play history from {self._path}.") from exc
        with self._lock:
            self._records = records

    def _write(self, records: list[UserPlayRecord]) -> None:
        assert self._path is not None
        document = json.dumps([record_to_dict(record) for record in records], indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(document, encoding="utf-8")
        except OSError as exc:
            raise TransportError(f"Unable to write play history to {self._path}.") from exc


def record_to_dict(record: UserPlayRecord) -> dict[str, object]:
    return {
        "quiz_id": record.quiz_id,
        "quiz_title": record.quiz_title,
        "category": record.category,
        "score": record.score,
        "total_questions": record.total_questions,
        "played_at": record.played_at.isoformat(),
    }


def _record_from_dict(data: dict[str, object]) -> UserPlayRecord:
    return UserPlayRecord(
        quiz_id=str(data["quiz_id"]),
        quiz_title=str(data["quiz_title"]),
        category=str(data["category"]),
        score=int(data["score"]),
        total_questions=int(data["total_questions"]),
        played_at=datetime.fromisoformat(str(data["played_at"])),
    )

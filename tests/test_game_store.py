from threading import Thread

import pytest

from quiz_reel.core.errors import ValidationError
from quiz_reel.core.models import GameKind
from quiz_reel.core.services.game_store import GameAggregateStore, GameResultService


def test_snapshot_has_every_kind_and_only_filled_slots():
    service = GameResultService()
    snapshot = service.update_game_result("movie_quiz", "action", "u1", 50)

    assert set(snapshot.game_stats) == {kind.value for kind in GameKind}
    assert snapshot.game_stats["movie_quiz"] == {"action": 50}
    assert snapshot.leaderboards["movie_quiz"] == {"action": [{"user_id": "u1", "score": 50}]}
    assert snapshot.game_stats["year_quiz"] == {}


def test_leaderboard_scenario_through_service():
    service = GameResultService()
    service.update_game_result("movie_quiz", "action", "u1", 50)
    service.update_game_result("movie_quiz", "action", "u1", 40)
    service.update_game_result("movie_quiz", "action", "u1", 70)
    snapshot = service.update_game_result("movie_quiz", "action", "u2", 60)

    assert snapshot.leaderboards["movie_quiz"]["action"] == [
        {"user_id": "u1", "score": 70},
        {"user_id": "u2", "score": 60},
    ]
    assert snapshot.game_stats["movie_quiz"]["action"] == 70


def test_description_games_keep_best_run_without_leaderboard():
    service = GameResultService()
    service.update_game_result("description_quiz", "drama", "u1", {"rounds": 3, "avg_percentage": 80})
    service.update_game_result("description_quiz", "drama", "u2", {"rounds": 3, "avg_percentage": 95})
    snapshot = service.update_game_result(
        "description_quiz", "drama", "u1", {"rounds": 4, "avg_percentage": 50}
    )
    assert snapshot.game_stats["description_quiz"]["drama"] == {"rounds": 4, "avg_percentage": 50.0}
    assert snapshot.leaderboards["description_quiz"] == {}


def test_genres_are_independent():
    service = GameResultService()
    service.update_game_result("actor_quiz", "comedy", "u1", 5)
    service.update_game_result("actor_quiz", "horror", "u1", 9)
    assert service.snapshot().game_stats["actor_quiz"] == {"comedy": 5, "horror": 9}


def test_invalid_input_leaves_store_untouched():
    service = GameResultService()
    with pytest.raises(ValidationError):
        service.update_game_result("movie_quiz", "Action!", "u1", 10)
    with pytest.raises(ValidationError):
        service.update_game_result("unknown", "action", "u1", 10)
    with pytest.raises(ValidationError):
        service.update_game_result("movie_quiz", "action", "", 10)
    assert service.store.items() == []


def test_injected_store_is_shared():
    store = GameAggregateStore()
    GameResultService(store).update_game_result("year_quiz", "western", "u1", 3)
    assert GameResultService(store).get_leaderboard("year_quiz", "western")[0].score == 3


def test_concurrent_results_keep_personal_bests():
    service = GameResultService()

    def play(user: str) -> None:
        for score in range(1, 51):
            service.update_game_result("series_quiz", "crime", user, score)

    threads = [Thread(target=play, args=(f"u{i}",)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    board = service.get_leaderboard("series_quiz", "crime")
    assert len(board) == 8
    assert all(entry.score == 50 for entry in board)
    assert service.snapshot().game_stats["series_quiz"]["crime"] == 50

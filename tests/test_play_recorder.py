import pytest

from quiz_reel.core.errors import ValidationError
from quiz_reel.core.scoring import evaluate
from quiz_reel.core.services.play_recorder import record_play


def test_first_play_updates_aggregates(quiz):
    outcome = record_play(quiz, "u1", {"q1": 0, "q2": [1, 2]})

    assert outcome.already_recorded is False
    updated = outcome.quiz
    assert updated.played_by == ["u1"]
    assert updated.stats.total_plays == 1
    assert updated.stats.total_correct_answers == 2
    assert updated.stats.question_stats["q1"].correct == 1
    assert updated.stats.question_stats["q2"].correct == 1
    assert updated.stats.question_stats["q2"].answers == {1: 1, 2: 1}


def test_input_quiz_is_not_modified(quiz):
    record_play(quiz, "u1", {"q1": 0})
    assert quiz.played_by == []
    assert quiz.stats.total_plays == 0
    assert quiz.stats.question_stats["q1"].attempts == 0


def test_replay_is_a_flagged_no_op(quiz):
    first = record_play(quiz, "u1", {"q1": 0, "q2": [1, 2]}).quiz
    second = record_play(first, "u1", {"q1": 1, "q2": [3]})

    assert second.already_recorded is True
    assert second.quiz is first
    assert second.quiz.stats.total_plays == 1
    assert second.quiz.stats.total_correct_answers == 2
    assert second.quiz.stats.question_stats["q1"].answers == {0: 1}


def test_unknown_question_ids_are_skipped(quiz):
    outcome = record_play(quiz, "u1", {"gone": 0, "q1": 0})
    assert outcome.quiz.stats.total_plays == 1
    assert "gone" not in outcome.quiz.stats.question_stats
    assert outcome.quiz.stats.total_correct_answers == 1


def test_correct_count_matches_evaluate(quiz):
    answers = {"q1": 2, "q2": [2, 1]}
    outcome = record_play(quiz, "u1", answers)
    gained = sum(stat.correct for stat in outcome.quiz.stats.question_stats.values())
    assert gained == evaluate(quiz.questions, answers) == outcome.correct_answers == 1


def test_plays_from_different_users_accumulate(quiz):
    quiz = record_play(quiz, "u1", {"q1": 0}).quiz
    quiz = record_play(quiz, "u2", {"q1": 1}).quiz
    stat = quiz.stats.question_stats["q1"]
    assert quiz.stats.total_plays == len(quiz.played_by) == 2
    assert (stat.attempts, stat.correct) == (2, 1)
    assert stat.answers == {0: 1, 1: 1}


def test_missing_question_stat_is_created(quiz):
    del quiz.stats.question_stats["q2"]
    outcome = record_play(quiz, "u1", {"q2": [1, 2]})
    assert outcome.quiz.stats.question_stats["q2"].correct == 1


@pytest.mark.parametrize("user_id", ["", "   ", None])
def test_user_id_is_required(quiz, user_id):
    with pytest.raises(ValidationError):
        record_play(quiz, user_id, {"q1": 0})


def test_answers_must_be_a_mapping(quiz):
    with pytest.raises(ValidationError):
        record_play(quiz, "u1", [0, 1])

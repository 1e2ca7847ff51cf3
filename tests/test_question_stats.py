from quiz_reel.core.models import QuestionStat, QuizStats
from quiz_reel.core.services.question_stats import question_stat_for, record_answer


def test_correct_answer_updates_all_counters():
    stat = QuestionStat()
    assert record_answer(stat, [0], [0]) is True
    assert stat.attempts == 1
    assert stat.correct == 1
    assert stat.answers == {0: 1}


def test_wrong_answer_counts_attempt_only():
    stat = QuestionStat()
    assert record_answer(stat, [2], [0]) is False
    assert stat.attempts == 1
    assert stat.correct == 0
    assert stat.answers == {2: 1}


def test_multi_select_increments_each_index_once():
    stat = QuestionStat()
    record_answer(stat, [1, 2, 2, 1], {1, 2})
    assert stat.answers == {1: 1, 2: 1}
    assert stat.correct == 1


def test_empty_submission_counts_attempt():
    stat = QuestionStat()
    record_answer(stat, [], [0])
    assert stat.attempts == 1
    assert stat.correct == 0
    assert stat.answers == {}


def test_attempts_never_below_correct():
    stat = QuestionStat()
    for submitted in ([0], [1], [0], [0, 1], []):
        record_answer(stat, submitted, [0])
        assert stat.attempts >= stat.correct
    assert stat.attempts == 5
    assert stat.correct == 2


def test_unseen_question_is_initialised_lazily():
    stats = QuizStats()
    entry = question_stat_for(stats, "new")
    assert entry == QuestionStat()
    assert stats.question_stats["new"] is entry
    assert question_stat_for(stats, "new") is entry

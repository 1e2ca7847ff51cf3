from quiz_reel.core.scoring import evaluate, is_correct, normalize_answer


def test_scenario_two_questions_all_correct(questions):
    assert evaluate(questions, {"q1": 0, "q2": [1, 2]}) == 2


def test_submission_order_does_not_matter(questions):
    assert evaluate(questions, {"q2": [2, 1]}) == 1


def test_missing_and_unknown_answers_do_not_count(questions):
    assert evaluate(questions, {}) == 0
    assert evaluate(questions, {"ghost": 0, "q1": 0}) == 1


def test_partial_multi_select_is_wrong(questions):
    assert evaluate(questions, {"q2": [1]}) == 0
    assert evaluate(questions, {"q2": [1, 2, 3]}) == 0


def test_scalar_answer_on_multi_correct_question_is_wrong(questions):
    assert evaluate(questions, {"q2": 1}) == 0


def test_scalar_and_singleton_list_are_equivalent(questions):
    assert evaluate(questions, {"q1": [0]}) == 1


def test_normalize_answer():
    assert normalize_answer(3) == frozenset({3})
    assert normalize_answer([1, 1, 2]) == frozenset({1, 2})
    assert normalize_answer(True) == frozenset()
    assert normalize_answer("0") == frozenset()
    assert normalize_answer(None) == frozenset()


def test_empty_submission_never_correct():
    assert not is_correct(frozenset(), frozenset())
    assert is_correct(frozenset({1}), frozenset({1}))

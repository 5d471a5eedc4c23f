from itertools import combinations

import pytest

from app.models import QuestionType
from app.services.answer_evaluator import is_correct


def all_selections(option_ids):
    for size in range(len(option_ids) + 1):
        for combo in combinations(option_ids, size):
            yield set(combo)


@pytest.mark.parametrize("question_type", [QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE])
def test_single_answer_types_accept_only_the_correct_singleton(question_type):
    option_ids = [10, 11, 12, 13] if question_type == QuestionType.SINGLE_CHOICE else [10, 11]

    for correct in option_ids:
        for selection in all_selections(option_ids):
            expected = selection == {correct}
            assert is_correct(selection, [correct], question_type) is expected


def test_single_choice_rejects_empty_and_full_selection():
    assert is_correct([], [1], QuestionType.SINGLE_CHOICE) is False
    assert is_correct([1, 2, 3, 4], [1], QuestionType.SINGLE_CHOICE) is False


def test_multi_choice_is_all_or_nothing():
    option_ids = [1, 2, 3, 4]
    correct = {1, 3}

    for selection in all_selections(option_ids):
        assert is_correct(selection, correct, QuestionType.MULTI_CHOICE) is (selection == correct)


def test_multi_choice_scenario():
    correct = [1, 3]
    assert is_correct({1, 3}, correct, QuestionType.MULTI_CHOICE) is True
    assert is_correct({3, 1}, correct, QuestionType.MULTI_CHOICE) is True
    assert is_correct({1}, correct, QuestionType.MULTI_CHOICE) is False
    assert is_correct({1, 2, 3}, correct, QuestionType.MULTI_CHOICE) is False


def test_true_false_scenario():
    true_id, false_id = 101, 102  # "صح" is correct, "خطأ" is not
    assert is_correct([true_id], [true_id], QuestionType.TRUE_FALSE) is True
    assert is_correct([false_id], [true_id], QuestionType.TRUE_FALSE) is False


def test_accepts_question_type_as_stored_string():
    assert is_correct([5], [5], "SINGLE_CHOICE") is True
    assert is_correct([5, 6], [5, 6], "MULTI_CHOICE") is True


def test_duplicate_ids_in_selection_count_once():
    assert is_correct([5, 5], [5], QuestionType.SINGLE_CHOICE) is True


@pytest.mark.parametrize(
    "question_type,correct,options",
    [
        (QuestionType.SINGLE_CHOICE, {2}, [1, 2, 3]),
        (QuestionType.TRUE_FALSE, {1}, [1, 2]),
        (QuestionType.MULTI_CHOICE, {1, 2}, [1, 2, 3]),
        (QuestionType.MULTI_CHOICE, {1, 2, 3}, [1, 2, 3]),
    ],
)
def test_every_question_has_a_winning_and_a_losing_selection(question_type, correct, options):
    outcomes = {is_correct(selection, correct, question_type) for selection in all_selections(options)}
    assert outcomes == {True, False}

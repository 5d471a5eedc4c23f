"""Question builders shared by the test modules."""

from app.models import QuestionType

AUTHOR = "author-1"
STUDENT = "student-1"
OTHER_STUDENT = "student-2"


def true_false(correct_first: bool = True):
    return (
        QuestionType.TRUE_FALSE,
        [("صح", correct_first), ("خطأ", not correct_first)],
    )


def single_choice(correct_index: int = 0, size: int = 4):
    return (
        QuestionType.SINGLE_CHOICE,
        [(f"Option {i + 1}", i == correct_index) for i in range(size)],
    )


def multi_choice(correct_indexes=(0, 2), size: int = 4):
    return (
        QuestionType.MULTI_CHOICE,
        [(f"Option {i + 1}", i in correct_indexes) for i in range(size)],
    )


def correct_ids(question):
    return [option.id for option in question.options if option.is_correct]


def wrong_ids(question):
    return [next(option.id for option in question.options if not option.is_correct)]

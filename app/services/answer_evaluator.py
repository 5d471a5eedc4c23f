# app/services/answer_evaluator.py
"""
Answer correctness rules shared by the attempt service and the session controller.

Never trust a correctness flag sent by a client: the stored value is always
the one computed here on the server.
"""

from typing import Iterable, Union

from app.models.question import QuestionType


def is_correct(
    selected_option_ids: Iterable[int],
    correct_option_ids: Iterable[int],
    question_type: Union[QuestionType, str],
) -> bool:
    """
    Decide whether a selection answers a question correctly.

    - SINGLE_CHOICE / TRUE_FALSE: exactly one option selected and it is the
      correct one. Zero or several selected options are simply wrong.
    - MULTI_CHOICE: the selection must equal the correct set, no partial credit.

    Total over its input: never raises for empty or unknown ids.
    """
    selected = set(selected_option_ids)
    correct = set(correct_option_ids)

    if QuestionType(question_type) == QuestionType.MULTI_CHOICE:
        return bool(correct) and selected == correct

    return len(selected) == 1 and len(correct) == 1 and selected == correct

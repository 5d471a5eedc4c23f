import pytest

from app.core.exceptions import (
    IncompleteAttemptError,
    InvalidStateError,
    TransientPersistenceError,
)
from app.models import QuizAttempt
from app.session import AttemptSessionController, LocalAttemptBackend
from tests.factories import STUDENT, correct_ids, multi_choice, single_choice, true_false, wrong_ids


class FlakyBackend:
    """Wraps a backend and fails selected calls like a bad network would."""

    def __init__(self, backend):
        self.backend = backend
        self.failures = {}
        self.calls = []

    def fail(self, method: str, mode: str = "before", times: int = 1):
        # "before": the request never arrives, "after": it runs but the response is lost
        self.failures.setdefault(method, []).extend([mode] * times)

    def __getattr__(self, name):
        target = getattr(self.backend, name)

        def call(*args):
            self.calls.append(name)
            modes = self.failures.get(name)
            if modes:
                mode = modes.pop(0)
                if mode == "after":
                    target(*args)
                raise TransientPersistenceError(f"{name} failed")
            return target(*args)

        return call


@pytest.fixture
def backend(db):
    return FlakyBackend(LocalAttemptBackend(db, STUDENT))


@pytest.fixture
def quiz(make_quiz):
    return make_quiz([true_false(), multi_choice(correct_indexes=(0, 2)), single_choice(1)])


@pytest.fixture
def session(quiz, backend):
    return AttemptSessionController(backend.get_quiz(quiz.id), backend)


def answer_everything(session, quiz, correct=True):
    for index, question in enumerate(quiz.questions):
        session.go_to(index)
        ids = correct_ids(question) if correct else wrong_ids(question)
        if question.question_type == "MULTI_CHOICE":
            for option_id in ids:
                session.select_option(option_id)
            session.confirm()
        else:
            session.select_option(ids[0])


def test_navigation_stays_in_range(session):
    assert session.current_question["sequence"] == 1
    assert session.previous()["sequence"] == 1
    assert session.go_to(2)["sequence"] == 3
    assert session.next()["sequence"] == 3

    with pytest.raises(IndexError):
        session.go_to(3)


def test_options_require_a_started_attempt(session, quiz):
    with pytest.raises(InvalidStateError):
        session.select_option(quiz.questions[0].options[0].id)


def test_single_choice_is_submitted_on_click(session, quiz, backend):
    session.start()
    question = quiz.questions[0]

    answer = session.select_option(correct_ids(question)[0])

    assert answer.is_correct is True
    assert answer.synced is True
    assert answer.correct_option_ids == correct_ids(question)
    assert answer.justification == "Because 1"
    assert backend.calls.count("submit_answer") == 1


def test_answered_question_only_redisplays(session, quiz, backend):
    session.start()
    question = quiz.questions[0]
    first = session.select_option(wrong_ids(question)[0])

    again = session.select_option(correct_ids(question)[0])

    assert again.is_correct is False
    assert again.selected_option_ids == first.selected_option_ids
    assert backend.calls.count("submit_answer") == 1


def test_multi_choice_waits_for_confirm(session, quiz, backend):
    session.start()
    question = quiz.questions[1]
    session.go_to(1)
    first, second, third = [option.id for option in question.options[:3]]

    assert session.select_option(first) is None
    session.select_option(second)
    session.select_option(third)
    session.select_option(second)
    assert session.pending_selection() == {first, third}
    assert "submit_answer" not in backend.calls

    answer = session.confirm()

    assert answer.is_correct is True
    assert answer.selected_option_ids == sorted([first, third])
    assert session.pending_selection() == set()


def test_confirm_without_selection(session):
    session.start()
    session.go_to(1)

    with pytest.raises(ValueError):
        session.confirm()


def test_foreign_option_is_rejected(session, quiz):
    session.start()

    with pytest.raises(ValueError):
        session.select_option(quiz.questions[1].options[0].id)


def test_complete_requires_every_answer(session, quiz, backend):
    session.start()
    session.select_option(correct_ids(quiz.questions[0])[0])

    assert not session.can_complete
    with pytest.raises(IncompleteAttemptError):
        session.complete()
    assert "complete_attempt" not in backend.calls


def test_full_session(session, quiz, db):
    attempt_id = session.start()
    answer_everything(session, quiz)

    assert session.can_complete
    assert session.complete() == attempt_id
    assert session.completed
    assert session.result["score"] == 3
    assert db.get(QuizAttempt, attempt_id).completed_at is not None


def test_start_resumes_answers_from_server(session, quiz, backend):
    attempt_id = session.start()
    session.select_option(correct_ids(quiz.questions[0])[0])

    resumed = AttemptSessionController(backend.get_quiz(quiz.id), backend)

    assert resumed.start() == attempt_id
    assert resumed.answered_count == 1
    assert resumed.answer_for(quiz.questions[0].id).is_correct is True


def test_open_attempt_payload_seeds_the_session(session, quiz, backend):
    attempt_id = session.start()
    session.select_option(wrong_ids(quiz.questions[0])[0])

    resumed = AttemptSessionController(
        backend.get_quiz(quiz.id), backend, open_attempt=backend.get_open_attempt(quiz.id)
    )

    starts = backend.calls.count("start_attempt")
    assert resumed.has_started
    assert resumed.start() == attempt_id
    assert backend.calls.count("start_attempt") == starts
    assert resumed.answer_for(quiz.questions[0].id).is_correct is False


def test_unsaved_answer_is_flushed_on_complete(session, quiz, backend):
    session.start()
    backend.fail("submit_answer")
    answer_everything(session, quiz)

    answer = session.answer_for(quiz.questions[0].id)
    assert answer.synced is False
    assert answer.is_correct is None
    assert session.answered_count == 3

    session.complete()

    assert session.completed
    assert session.answer_for(quiz.questions[0].id).synced is True
    assert session.result["score"] == 3


def test_complete_can_be_retried_when_flush_fails(session, quiz, backend):
    session.start()
    backend.fail("submit_answer")
    answer_everything(session, quiz)
    backend.fail("submit_answer")

    with pytest.raises(TransientPersistenceError):
        session.complete()
    assert not session.completed
    assert "complete_attempt" not in backend.calls

    session.complete()

    assert session.completed
    assert session.result["score"] == 3


def test_lost_answer_response_defers_to_the_server(session, quiz, backend):
    session.start()
    question = quiz.questions[0]
    backend.fail("submit_answer", mode="after")
    session.select_option(wrong_ids(question)[0])
    answer_everything(session, quiz)

    session.complete()

    stored = session.answer_for(question.id)
    assert stored.synced is True
    assert stored.is_correct is False
    assert session.result["score"] == 2


def test_lost_complete_response_is_treated_as_success(session, quiz, backend):
    attempt_id = session.start()
    answer_everything(session, quiz)
    backend.fail("complete_attempt", mode="after")

    with pytest.raises(TransientPersistenceError):
        session.complete()
    assert not session.completed

    assert session.complete() == attempt_id
    assert session.completed
    assert backend.get_best_attempt(quiz.id)["score"] == 3


def test_server_side_incomplete_resyncs(quiz, backend):
    started = backend.start_attempt(quiz.id)
    first = quiz.questions[0]
    backend.submit_answer(started["attempt_id"], first.id, correct_ids(first))
    open_attempt = backend.get_open_attempt(quiz.id)
    # Pretend the other answers were saved when they were not
    for question in quiz.questions[1:]:
        open_attempt["answers"].append(
            {
                "question_id": question.id,
                "selected_option_ids": correct_ids(question),
                "is_correct": True,
            }
        )
    session = AttemptSessionController(backend.get_quiz(quiz.id), backend, open_attempt)
    assert session.can_complete

    with pytest.raises(IncompleteAttemptError):
        session.complete()

    assert not session.completed
    assert session.answered_count == 1


def test_completion_from_another_tab_is_adopted(session, quiz, db):
    attempt_id = session.start()
    session.backend.fail("submit_answer", times=1)
    answer_everything(session, quiz)
    assert session.answer_for(quiz.questions[0].id).synced is False

    other_backend = LocalAttemptBackend(db, STUDENT)
    other_tab = AttemptSessionController(other_backend.get_quiz(quiz.id), other_backend)
    assert other_tab.start() == attempt_id
    answer_everything(other_tab, quiz, correct=False)
    other_tab.complete()

    assert session.complete() == attempt_id
    assert session.completed
    assert session.answered_count == 3
    assert "complete_attempt" not in session.backend.calls
    assert session.complete() == attempt_id

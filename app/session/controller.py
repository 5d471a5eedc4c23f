# app/session/controller.py
import logging
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field

from app.core.exceptions import (
    AlreadyCompletedError,
    DuplicateAnswerError,
    IncompleteAttemptError,
    InvalidStateError,
    QuizEngineError,
    TransientPersistenceError,
)
from app.models.question import QuestionType

logger = logging.getLogger(__name__)

IMMEDIATE_SUBMIT_TYPES = {QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE}


class LocalAnswer(BaseModel):
    """What the session shows for an answered question."""

    selected_option_ids: List[int]
    is_correct: Optional[bool] = None  # unknown until the server judged it
    correct_option_ids: List[int] = Field(default_factory=list)
    justification: Optional[str] = None
    synced: bool = True


class AttemptSessionController:
    """
    Interactive loop over one quiz attempt.

    Holds request-scoped UI state only. Correctness always comes from the
    backend; the local answered map may run ahead of the server after a
    transient failure, and complete() reconciles before asking the server
    for the final, authoritative check.

    `quiz` is the payload of GET /quizzes/{id}; `backend` is a QuizApiClient
    or LocalAttemptBackend; `open_attempt` is the payload of
    GET /quizzes/{id}/attempts/open when resuming.
    """

    def __init__(self, quiz: Dict[str, Any], backend, open_attempt: Optional[Dict[str, Any]] = None):
        self.quiz = quiz
        self.questions = sorted(quiz["questions"], key=lambda q: q["sequence"])
        self.backend = backend

        self.attempt_id: Optional[int] = None
        self.current_index = 0
        self.answers: Dict[int, LocalAnswer] = {}
        self.pending_selections: Dict[int, Set[int]] = {}
        self.result: Optional[Dict[str, Any]] = None
        self.completed = False

        if open_attempt:
            self.attempt_id = open_attempt["id"]
            self._seed_answers(open_attempt.get("answers", []))

    # ==================== State ====================

    @property
    def has_started(self) -> bool:
        return self.attempt_id is not None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    @property
    def can_complete(self) -> bool:
        return (
            self.has_started
            and not self.completed
            and self.answered_count == self.total_questions
        )

    @property
    def current_question(self) -> Dict[str, Any]:
        return self.questions[self.current_index]

    def answer_for(self, question_id: int) -> Optional[LocalAnswer]:
        return self.answers.get(question_id)

    def pending_selection(self) -> Set[int]:
        return set(self.pending_selections.get(self.current_question["id"], set()))

    # ==================== Navigation ====================

    def go_to(self, index: int) -> Dict[str, Any]:
        if not 0 <= index < self.total_questions:
            raise IndexError(f"Question index {index} out of range")
        self.current_index = index
        return self.current_question

    def next(self) -> Dict[str, Any]:
        if self.current_index < self.total_questions - 1:
            self.current_index += 1
        return self.current_question

    def previous(self) -> Dict[str, Any]:
        if self.current_index > 0:
            self.current_index -= 1
        return self.current_question

    # ==================== Lifecycle ====================

    def start(self) -> int:
        """Start or resume the attempt and load any answers already on the server."""
        if self.has_started:
            return self.attempt_id

        started = self.backend.start_attempt(self.quiz["id"])
        self.attempt_id = started["attempt_id"]
        if not started["is_new"]:
            self._sync_from_server(keep_unsynced=False)

        logger.info(f"Session on quiz {self.quiz['id']} using attempt {self.attempt_id}")
        return self.attempt_id

    def select_option(self, option_id: int) -> Optional[LocalAnswer]:
        """
        Handle a click on an option of the current question.

        Single choice and true/false answers are submitted right away.
        Multi choice selections are toggled until confirm() is called.
        Answered questions only redisplay their stored answer.
        """
        self._require_started()
        question = self.current_question

        if question["id"] in self.answers:
            return self.answers[question["id"]]

        if option_id not in {option["id"] for option in question["options"]}:
            raise ValueError(f"Option {option_id} is not part of question {question['id']}")

        if QuestionType(question["question_type"]) in IMMEDIATE_SUBMIT_TYPES:
            return self._submit(question, [option_id])

        selection = self.pending_selections.setdefault(question["id"], set())
        if option_id in selection:
            selection.remove(option_id)
        else:
            selection.add(option_id)
        return None

    def confirm(self) -> LocalAnswer:
        """Submit the pending multi choice selection of the current question."""
        self._require_started()
        question = self.current_question

        if question["id"] in self.answers:
            return self.answers[question["id"]]

        selection = self.pending_selections.get(question["id"])
        if not selection:
            raise ValueError("Select at least one option")

        return self._submit(question, sorted(selection))

    def complete(self) -> int:
        """
        Finish the attempt and return its id, the reference used for the review.

        Safe to call again after any failure.
        """
        self._require_started()
        if self.completed:
            return self.attempt_id

        if self.answered_count < self.total_questions:
            raise IncompleteAttemptError(
                f"Please answer all questions ({self.answered_count}/{self.total_questions})"
            )

        self._flush_unsynced()
        if self.completed:
            return self.attempt_id

        try:
            self.result = self.backend.complete_attempt(self.attempt_id)
        except AlreadyCompletedError:
            # An earlier call went through but its response was lost
            logger.info(f"Attempt {self.attempt_id} was already completed")
        except IncompleteAttemptError:
            # The server is missing answers we believed were saved
            self._sync_from_server(keep_unsynced=False)
            raise

        self.completed = True
        return self.attempt_id

    # ==================== Internals ====================

    def _require_started(self):
        if not self.has_started:
            raise InvalidStateError("Start the quiz first")

    def _seed_answers(self, answers: List[Dict[str, Any]]):
        for answer in answers:
            self.answers[answer["question_id"]] = LocalAnswer(
                selected_option_ids=answer["selected_option_ids"],
                is_correct=answer["is_correct"],
                correct_option_ids=answer.get("correct_option_ids", []),
                justification=answer.get("justification"),
                synced=True,
            )

    def _sync_from_server(self, keep_unsynced: bool):
        open_attempt = self.backend.get_open_attempt(self.quiz["id"])
        unsynced = {
            question_id: answer
            for question_id, answer in self.answers.items()
            if not answer.synced
        }

        self.answers = {}
        if open_attempt and open_attempt["id"] == self.attempt_id:
            self._seed_answers(open_attempt["answers"])

        if keep_unsynced:
            for question_id, answer in unsynced.items():
                self.answers.setdefault(question_id, answer)

    def _submit(self, question: Dict[str, Any], option_ids: List[int]) -> LocalAnswer:
        question_id = question["id"]
        answer = LocalAnswer(selected_option_ids=option_ids, synced=False)
        self.answers[question_id] = answer
        self.pending_selections.pop(question_id, None)

        self._send(question_id, answer)
        return self.answers.get(question_id)

    def _send(self, question_id: int, answer: LocalAnswer):
        try:
            feedback = self.backend.submit_answer(
                self.attempt_id, question_id, answer.selected_option_ids
            )
        except TransientPersistenceError as e:
            logger.warning(f"Answer to question {question_id} not saved yet: {e}")
            return
        except DuplicateAnswerError:
            # The server already holds an answer for this question; it wins
            self._sync_from_server(keep_unsynced=True)
            return
        except InvalidStateError:
            # Completed from another session; keep what was shown locally
            logger.info(f"Attempt {self.attempt_id} was completed elsewhere")
            self.completed = True
            return
        except QuizEngineError:
            self.answers.pop(question_id, None)
            raise

        answer.is_correct = feedback["is_correct"]
        answer.correct_option_ids = feedback.get("correct_option_ids", [])
        answer.justification = feedback.get("justification")
        answer.synced = True

    def _flush_unsynced(self):
        for question_id, answer in list(self.answers.items()):
            if answer.synced:
                continue
            self._send(question_id, answer)
            if self.completed:
                return
            if question_id in self.answers and not self.answers[question_id].synced:
                raise TransientPersistenceError(
                    f"Answer to question {question_id} could not be saved, try again"
                )

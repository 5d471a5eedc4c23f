# app/session/backends.py
import logging
from typing import Any, Dict, List, Optional

import requests
from sqlalchemy.orm import Session

from app.core.decorator import DBException
from app.core.exceptions import ERRORS_BY_TYPE, TransientPersistenceError
from app.schemas.quiz import QuizForAttempt
from app.schemas.quiz_attempt import OpenAttemptResponse
from app.services.attempt_stats import AttemptStatsService
from app.services.quiz import QuizService
from app.services.quiz_attempt import QuizAttemptService

logger = logging.getLogger(__name__)


class QuizApiClient:
    """HTTP client for the attempt endpoints.

    Error responses are turned back into the domain exceptions raised by the
    server; connection failures and 5xx become TransientPersistenceError.
    """

    def __init__(self, base_url: str, token: str, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.warning(f"Request to {url} failed: {e}")
            raise TransientPersistenceError(f"Could not reach {self.base_url}") from e

        if response.status_code < 400:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}

        error_cls = ERRORS_BY_TYPE.get(body.get("type"))
        if error_cls:
            raise error_cls(body.get("error"))

        if body.get("retryable") or response.status_code >= 500:
            raise TransientPersistenceError(body.get("error") or response.text)

        response.raise_for_status()

    def get_quiz(self, quiz_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/quizzes/{quiz_id}")

    def start_attempt(self, quiz_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/quizzes/{quiz_id}/attempts")

    def get_open_attempt(self, quiz_id: int) -> Optional[Dict[str, Any]]:
        return self._request("GET", f"/quizzes/{quiz_id}/attempts/open")

    def get_best_attempt(self, quiz_id: int) -> Optional[Dict[str, Any]]:
        return self._request("GET", f"/quizzes/{quiz_id}/attempts/best")

    def submit_answer(
        self, attempt_id: int, question_id: int, option_ids: List[int]
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/attempts/{attempt_id}/answers",
            json={"question_id": question_id, "selected_option_ids": list(option_ids)},
        )

    def complete_attempt(self, attempt_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/attempts/{attempt_id}/complete")


class LocalAttemptBackend:
    """Same surface as QuizApiClient, served in-process from a DB session."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _call(self, func, *args):
        try:
            return func(*args)
        except DBException as e:
            if e.retryable:
                raise TransientPersistenceError(e.message) from e
            raise

    def get_quiz(self, quiz_id: int) -> Dict[str, Any]:
        quiz = self._call(QuizService(self.db).get_visible_quiz, quiz_id, self.user_id)
        return QuizForAttempt.model_validate(quiz).model_dump(mode="json")

    def start_attempt(self, quiz_id: int) -> Dict[str, Any]:
        attempt, is_new = self._call(
            QuizAttemptService(self.db).start_attempt, quiz_id, self.user_id
        )
        return {
            "attempt_id": attempt.id,
            "is_new": is_new,
            "total_questions": attempt.total_questions,
        }

    def get_open_attempt(self, quiz_id: int) -> Optional[Dict[str, Any]]:
        attempt = self._call(
            QuizAttemptService(self.db).get_open_attempt, quiz_id, self.user_id
        )
        if not attempt:
            return None
        return OpenAttemptResponse.model_validate(attempt).model_dump(mode="json")

    def get_best_attempt(self, quiz_id: int) -> Optional[Dict[str, Any]]:
        attempt = self._call(
            AttemptStatsService(self.db).get_best_attempt, quiz_id, self.user_id
        )
        if not attempt:
            return None
        return {"score": attempt.score, "total_questions": attempt.total_questions}

    def submit_answer(
        self, attempt_id: int, question_id: int, option_ids: List[int]
    ) -> Dict[str, Any]:
        answer, question = self._call(
            QuizAttemptService(self.db).submit_answer,
            attempt_id,
            self.user_id,
            question_id,
            option_ids,
        )
        return {
            "is_correct": answer.is_correct,
            "correct_option_ids": question.correct_option_ids,
            "justification": question.justification,
        }

    def complete_attempt(self, attempt_id: int) -> Dict[str, Any]:
        attempt = self._call(
            QuizAttemptService(self.db).complete_attempt, attempt_id, self.user_id
        )
        return {
            "attempt_id": attempt.id,
            "score": attempt.score,
            "total_questions": attempt.total_questions,
            "percentage": float(attempt.percentage),
        }

# app/core/exceptions.py
from fastapi import status


class QuizEngineError(Exception):
    """Base class for expected, caller-recoverable quiz attempt errors.

    None of these are transient: retrying the same call yields the same error.
    """

    type = "quiz_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Quiz operation failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(QuizEngineError):
    type = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidStateError(QuizEngineError):
    type = "invalid_state"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Quiz attempt already completed"


class DuplicateAnswerError(QuizEngineError):
    type = "duplicate_answer"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Question already answered in this attempt"


class IncompleteAttemptError(QuizEngineError):
    type = "incomplete_attempt"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All questions must be answered before completing"


class AlreadyCompletedError(QuizEngineError):
    type = "already_completed"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Quiz attempt already completed"


ERRORS_BY_TYPE = {
    cls.type: cls
    for cls in (
        NotFoundError,
        InvalidStateError,
        DuplicateAnswerError,
        IncompleteAttemptError,
        AlreadyCompletedError,
    )
}


class TransientPersistenceError(Exception):
    """Storage or network failure; the only kind a caller should retry."""

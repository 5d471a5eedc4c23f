# app/routers/quiz_attempt.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.core.limiter import limiter
from app.schemas.auth import CurrentUser
from app.schemas.quiz_attempt import (
    AttemptHistoryItem,
    AttemptSummaryResponse,
    BestAttemptResponse,
    CompleteAttemptResponse,
    OpenAttemptResponse,
    StartAttemptResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from app.services.attempt_stats import AttemptStatsService
from app.services.quiz_attempt import QuizAttemptService

router = APIRouter(
    tags=["Quiz Attempts"],
    responses={404: {"description": "Not found"}},
)


# ==================== Per-Quiz Endpoints ====================


@router.post("/quizzes/{quiz_id}/attempts", response_model=StartAttemptResponse)
def start_attempt(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Start a quiz attempt, or resume the open one.
    Calling this twice returns the same attempt.
    """
    service = QuizAttemptService(db)
    attempt, is_new = service.start_attempt(quiz_id, current_user.id)
    return {
        "attempt_id": attempt.id,
        "is_new": is_new,
        "total_questions": attempt.total_questions,
    }


@router.get(
    "/quizzes/{quiz_id}/attempts/open",
    response_model=Optional[OpenAttemptResponse],
)
def get_open_attempt(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Open attempt with recorded answers, or null when there is nothing to resume."""
    service = QuizAttemptService(db)
    return service.get_open_attempt(quiz_id, current_user.id)


@router.get(
    "/quizzes/{quiz_id}/attempts/best",
    response_model=Optional[BestAttemptResponse],
)
def get_best_attempt(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Highest scoring completed attempt, or null."""
    service = AttemptStatsService(db)
    attempt = service.get_best_attempt(quiz_id, current_user.id)
    if not attempt:
        return None
    return {"score": attempt.score, "total_questions": attempt.total_questions}


@router.get(
    "/quizzes/{quiz_id}/attempts",
    response_model=List[AttemptHistoryItem],
)
def get_attempt_history(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = AttemptStatsService(db)
    return service.get_history(quiz_id, current_user.id)


# ==================== Per-Attempt Endpoints ====================


@router.post(
    "/attempts/{attempt_id}/answers",
    response_model=SubmitAnswerResponse,
    status_code=201,
)
@limiter.limit(settings.answer_rate_limit)
def submit_answer(
    request: Request,
    attempt_id: int,
    answer_in: SubmitAnswerRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Submit the answer to one question.
    Answers are final: a second submission for the same question is rejected.
    """
    service = QuizAttemptService(db)
    answer, question = service.submit_answer(
        attempt_id,
        current_user.id,
        answer_in.question_id,
        answer_in.selected_option_ids,
    )
    return {
        "is_correct": answer.is_correct,
        "correct_option_ids": question.correct_option_ids,
        "justification": question.justification,
    }


@router.post("/attempts/{attempt_id}/complete", response_model=CompleteAttemptResponse)
def complete_attempt(
    attempt_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = QuizAttemptService(db)
    attempt = service.complete_attempt(attempt_id, current_user.id)
    return {
        "attempt_id": attempt.id,
        "score": attempt.score,
        "total_questions": attempt.total_questions,
        "percentage": float(attempt.percentage),
    }


@router.get("/attempts/{attempt_id}/summary", response_model=AttemptSummaryResponse)
def get_attempt_summary(
    attempt_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Review of a completed attempt with the correct answers revealed."""
    service = QuizAttemptService(db)
    return service.get_attempt_summary(attempt_id, current_user.id)

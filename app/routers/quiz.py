# app/routers/quiz.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.schemas.auth import CurrentUser
from app.schemas.quiz import QuizForAttempt
from app.services.quiz import QuizService

router = APIRouter(
    prefix="/quizzes",
    tags=["Quizzes"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{quiz_id}", response_model=QuizForAttempt)
def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Get a quiz with its ordered questions and options for taking it.
    Correct answers are never included here.
    """
    service = QuizService(db)
    return service.get_visible_quiz(quiz_id, current_user.id)

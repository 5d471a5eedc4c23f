# app/services/quiz.py
from sqlalchemy.orm import Session, selectinload

from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError
from app.models.question import Question
from app.models.quiz import Quiz


class QuizService:
    """Read access to quiz definitions, filtered by the moderation visibility rule"""

    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def get_visible_quiz(self, quiz_id: int, user_id: str) -> Quiz:
        """Load a quiz with ordered questions and options, or raise NotFoundError."""
        quiz = (
            self.db.query(Quiz)
            .options(selectinload(Quiz.questions).selectinload(Question.options))
            .filter(Quiz.id == quiz_id)
            .first()
        )

        if not quiz or not quiz.is_visible_to(user_id):
            raise NotFoundError("Quiz not found")

        return quiz

    @db_exception
    def get_question(self, quiz_id: int, question_id: int) -> Question:
        question = (
            self.db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.id == question_id)
            .first()
        )

        if not question or question.quiz_id != quiz_id:
            raise NotFoundError("Question not found or does not belong to this quiz")

        return question

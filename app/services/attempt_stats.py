# app/services/attempt_stats.py
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.models.quiz_attempt import QuizAttempt


class AttemptStatsService:
    """Read-only views over a user's completed attempts on a quiz"""

    def __init__(self, db: Session):
        self.db = db

    def _completed_attempts(self, quiz_id: int, user_id: str):
        return self.db.query(QuizAttempt).filter(
            and_(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.user_id == user_id,
                QuizAttempt.completed_at.isnot(None),
            )
        )

    @db_exception
    def get_best_attempt(self, quiz_id: int, user_id: str) -> Optional[QuizAttempt]:
        """Completed attempt with the highest score, or None if there is none yet."""
        return (
            self._completed_attempts(quiz_id, user_id)
            .order_by(QuizAttempt.score.desc(), QuizAttempt.completed_at.desc())
            .first()
        )

    @db_exception
    def get_history(self, quiz_id: int, user_id: str) -> List[QuizAttempt]:
        """Completed attempts, newest first."""
        return (
            self._completed_attempts(quiz_id, user_id)
            .order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc())
            .all()
        )

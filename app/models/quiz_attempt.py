# app/models/quiz_attempt.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.sql import func

from app.core.database import Base


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    user_id = Column(String(64), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)

    # Attempt data (score/percentage stay at 0 until completion)
    score = Column(Integer, default=0, nullable=False)  # correctly answered questions
    total_questions = Column(Integer, nullable=False)  # snapshot at start
    percentage = Column(Numeric(5, 2), default=0, nullable=False)

    # Time tracking
    started_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at = Column(
        DateTime(timezone=True), nullable=True  # Null while the attempt is open
    )

    # At most one open attempt per (user, quiz)
    __table_args__ = (
        Index(
            "uq_quiz_attempts_open",
            "user_id",
            "quiz_id",
            unique=True,
            postgresql_where=completed_at.is_(None),
            sqlite_where=completed_at.is_(None),
        ),
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self):
        return (
            f"<QuizAttempt(id={self.id}, user_id={self.user_id}, score={self.score})>"
        )

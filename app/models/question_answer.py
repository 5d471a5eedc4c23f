# app/models/question_answer.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.core.database import Base


class QuestionAnswer(Base):
    __tablename__ = "question_answers"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    attempt_id = Column(
        Integer,
        ForeignKey("quiz_attempts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id = Column(
        Integer, ForeignKey("questions.id"), nullable=False, index=True
    )

    selected_option_ids = Column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False
    )  # sorted list of option ids: [12, 14]
    is_correct = Column(Boolean, nullable=False)  # frozen at submission

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Insert-only: one answer per question per attempt
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="unique_attempt_question"),
    )

    # Safe to reveal: the answer is locked in
    @property
    def correct_option_ids(self):
        return self.question.correct_option_ids

    @property
    def justification(self):
        return self.question.justification

    def __repr__(self):
        return f"<QuestionAnswer(attempt_id={self.attempt_id}, question_id={self.question_id}, correct={self.is_correct})>"

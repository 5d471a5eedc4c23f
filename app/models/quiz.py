# app/models/quiz.py
import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class QuizStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Owned by the moderation service, read-only here
    status = Column(String(20), default=QuizStatus.DRAFT.value, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    # Opaque identifier from the auth service
    contributor_id = Column(String(64), nullable=False, index=True)
    chapter_id = Column(Integer, nullable=True, index=True)

    # Aggregate counters
    attempt_count = Column(Integer, default=0, nullable=False)
    vote_score = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def is_visible_to(self, user_id: str) -> bool:
        """Contributors see their own quizzes at any status, others only approved ones."""
        if self.is_deleted:
            return False
        return self.contributor_id == user_id or self.status == QuizStatus.APPROVED.value

    def __repr__(self):
        return f"<Quiz(id={self.id}, title='{self.title}', status={self.status})>"

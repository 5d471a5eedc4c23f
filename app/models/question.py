# app/models/question.py
import enum

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from app.core.database import Base


class QuestionType(str, enum.Enum):
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTI_CHOICE = "MULTI_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # 1-based presentation order, managed by the quiz editor
    sequence = Column(Integer, nullable=False)
    question_type = Column(String(20), nullable=False)  # see QuestionType
    question_text = Column(Text, nullable=False)
    justification = Column(Text, nullable=True)  # shown once answered

    __table_args__ = (
        UniqueConstraint("quiz_id", "sequence", name="unique_question_sequence"),
    )

    @property
    def correct_option_ids(self):
        return [option.id for option in self.options if option.is_correct]

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, type={self.question_type})>"


class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    sequence = Column(Integer, nullable=False)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("question_id", "sequence", name="unique_option_sequence"),
    )

    def __repr__(self):
        return f"<QuestionOption(id={self.id}, question_id={self.question_id}, correct={self.is_correct})>"

# app/models/relations.py

from sqlalchemy.orm import relationship

from .question import Question, QuestionOption
from .question_answer import QuestionAnswer
from .quiz import Quiz
from .quiz_attempt import QuizAttempt


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Quiz definition (read-only to the attempt engine) ---

    # 1. Quiz to Questions (One-to-Many), presentation order
    Quiz.questions = relationship(
        "Question",
        back_populates="quiz",
        order_by=Question.sequence,
        cascade="all, delete-orphan",
    )
    Question.quiz = relationship("Quiz", back_populates="questions")

    # 2. Question to Options (One-to-Many)
    Question.options = relationship(
        "QuestionOption",
        back_populates="question",
        order_by=QuestionOption.sequence,
        cascade="all, delete-orphan",
    )
    QuestionOption.question = relationship("Question", back_populates="options")

    # --- Attempts ---

    # 3. Quiz to Attempts (One-to-Many), never cascaded
    Quiz.attempts = relationship("QuizAttempt", back_populates="quiz")
    QuizAttempt.quiz = relationship("Quiz", back_populates="attempts")

    # 4. Attempt to Answers (One-to-Many)
    QuizAttempt.answers = relationship(
        "QuestionAnswer",
        back_populates="attempt",
        cascade="all, delete-orphan",
    )
    QuestionAnswer.attempt = relationship("QuizAttempt", back_populates="answers")

    # 5. Answer to Question (Many-to-One)
    QuestionAnswer.question = relationship("Question")

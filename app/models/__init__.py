"""
Models package initialization
Import all models and setup relationships
"""

from .question import Question, QuestionOption, QuestionType
from .question_answer import QuestionAnswer
from .quiz import Quiz, QuizStatus
from .quiz_attempt import QuizAttempt

# Import and setup relationships
from .relations import setup_relationships

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Question",
    "QuestionAnswer",
    "QuestionOption",
    "QuestionType",
    "Quiz",
    "QuizAttempt",
    "QuizStatus",
]

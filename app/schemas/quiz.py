# app/schemas/quiz.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from app.models.question import QuestionType

# ==================== Quiz Taking Schemas ====================
# Correctness flags and justifications are never part of these payloads.


class OptionForAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sequence: int
    option_text: str


class QuestionForAttempt(BaseModel):
    """Schema for a question during an attempt - WITHOUT correct answers"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    sequence: int
    question_type: QuestionType
    question_text: str
    options: List[OptionForAttempt]


class QuizForAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: str
    contributor_id: str
    questions: List[QuestionForAttempt]

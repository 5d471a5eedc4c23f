# app/schemas/quiz_attempt.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.question import QuestionType

# ==================== Quiz Attempt Schemas ====================


class StartAttemptResponse(BaseModel):
    attempt_id: int
    is_new: bool
    total_questions: int


class SubmitAnswerRequest(BaseModel):
    """User's selection for a single question"""

    question_id: int
    selected_option_ids: List[int] = Field(
        ..., min_length=1, description="At least one option must be selected"
    )

    @field_validator("selected_option_ids")
    @classmethod
    def dedupe_ids(cls, value: List[int]) -> List[int]:
        return sorted(set(value))


class SubmitAnswerResponse(BaseModel):
    is_correct: bool
    # Revealed only after the answer is locked in
    correct_option_ids: List[int]
    justification: Optional[str] = None


class CompleteAttemptResponse(BaseModel):
    attempt_id: int
    score: int
    total_questions: int
    percentage: float


class BestAttemptResponse(BaseModel):
    score: int
    total_questions: int


class AnswerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: int
    selected_option_ids: List[int]
    is_correct: bool
    correct_option_ids: List[int]
    justification: Optional[str] = None


class OpenAttemptResponse(BaseModel):
    """Open attempt with the answers recorded so far (for resume)"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    total_questions: int
    started_at: datetime
    answers: List[AnswerResponse]


class AttemptHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    score: int
    total_questions: int
    percentage: float
    completed_at: datetime


# ==================== Review Schemas ====================


class ReviewOption(BaseModel):
    id: int
    text: str
    is_correct: bool


class ReviewQuestion(BaseModel):
    question_id: int
    sequence: int
    question_text: str
    question_type: QuestionType
    justification: Optional[str] = None
    options: List[ReviewOption]
    correct_option_ids: List[int]
    selected_option_ids: List[int]
    is_correct: bool


class AttemptSummaryResponse(BaseModel):
    attempt_id: int
    quiz_id: int
    quiz_title: str
    score: int
    total_questions: int
    percentage: float
    completed_at: datetime
    questions: List[ReviewQuestion]

import os
import tempfile
from pathlib import Path

# Configure a throwaway SQLite database before the app reads its settings
_DB_DIR = Path(tempfile.mkdtemp(prefix="quiz-engine-tests-"))
os.environ["DB_CONNECTION"] = "sqlite"
os.environ["DB_DATABASE"] = str(_DB_DIR / "test.db")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEBUG"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.core.security import jwt_manager  # noqa: E402
from app.models import (  # noqa: E402
    Question,
    QuestionOption,
    QuestionType,
    Quiz,
    QuizStatus,
)

from tests.factories import AUTHOR, STUDENT  # noqa: E402


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    from main import app

    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = STUDENT):
        return {"Authorization": f"Bearer {jwt_manager.create_access_token(user_id)}"}

    return _headers


@pytest.fixture
def make_quiz(db):
    """Build a quiz from [(type, [(text, is_correct), ...]), ...]."""

    def _make(
        questions,
        status: QuizStatus = QuizStatus.APPROVED,
        contributor_id: str = AUTHOR,
        is_deleted: bool = False,
    ) -> Quiz:
        quiz = Quiz(
            title="Quiz",
            description="A quiz",
            status=status.value,
            contributor_id=contributor_id,
            is_deleted=is_deleted,
        )
        for sequence, (question_type, options) in enumerate(questions, start=1):
            question = Question(
                sequence=sequence,
                question_type=QuestionType(question_type).value,
                question_text=f"Question {sequence}",
                justification=f"Because {sequence}",
            )
            question.options = [
                QuestionOption(sequence=i, option_text=text, is_correct=correct)
                for i, (text, correct) in enumerate(options, start=1)
            ]
            quiz.questions.append(question)

        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz

    return _make

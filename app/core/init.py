"""
Development data seeding
Creates an approved demo quiz covering every question type
"""

import logging

from sqlalchemy.orm import Session

from app.models.question import Question, QuestionOption, QuestionType
from app.models.quiz import Quiz, QuizStatus

logger = logging.getLogger(__name__)

DEMO_QUESTIONS = [
    {
        "question_type": QuestionType.TRUE_FALSE,
        "question_text": "الماء يغلي عند 100 درجة مئوية عند مستوى سطح البحر",
        "justification": "عند الضغط الجوي القياسي يغلي الماء عند 100 درجة مئوية.",
        "options": [("صح", True), ("خطأ", False)],
    },
    {
        "question_type": QuestionType.SINGLE_CHOICE,
        "question_text": "What is the time complexity of binary search?",
        "justification": "Each step halves the remaining search space.",
        "options": [("O(n)", False), ("O(log n)", True), ("O(n log n)", False), ("O(1)", False)],
    },
    {
        "question_type": QuestionType.MULTI_CHOICE,
        "question_text": "Which of these are prime numbers?",
        "justification": "2 and 7 have no divisors other than 1 and themselves.",
        "options": [("2", True), ("4", False), ("7", True), ("9", False)],
    },
]


def seed_demo_quiz(db: Session, contributor_id: str) -> Quiz:
    """
    Insert the demo quiz owned by `contributor_id`.

    Args:
        db: Database session
        contributor_id: Opaque identifier of the quiz owner
    """
    try:
        quiz = Quiz(
            title="Demo Quiz",
            description="One question of each type",
            status=QuizStatus.APPROVED.value,
            contributor_id=contributor_id,
        )

        for sequence, data in enumerate(DEMO_QUESTIONS, start=1):
            question = Question(
                sequence=sequence,
                question_type=data["question_type"].value,
                question_text=data["question_text"],
                justification=data["justification"],
            )
            question.options = [
                QuestionOption(sequence=i, option_text=text, is_correct=correct)
                for i, (text, correct) in enumerate(data["options"], start=1)
            ]
            quiz.questions.append(question)

        db.add(quiz)
        db.commit()
        db.refresh(quiz)

        logger.info(f"✅ Demo quiz created (ID: {quiz.id})")
        return quiz

    except Exception as e:
        logger.error(f"❌ Failed to seed demo quiz: {e}")
        db.rollback()
        raise

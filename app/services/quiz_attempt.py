# app/services/quiz_attempt.py
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from sqlalchemy import and_, case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.decorator import db_exception
from app.core.exceptions import (
    AlreadyCompletedError,
    DuplicateAnswerError,
    IncompleteAttemptError,
    InvalidStateError,
    NotFoundError,
)
from app.models.question import Question
from app.models.question_answer import QuestionAnswer
from app.models.quiz import Quiz
from app.models.quiz_attempt import QuizAttempt
from app.services.answer_evaluator import is_correct
from app.services.quiz import QuizService

logger = logging.getLogger(__name__)


class QuizAttemptService:
    """
    Lifecycle of a user's attempt on a quiz.

    OPEN --submit_answer--> OPEN --complete_attempt--> COMPLETED (terminal).
    Concurrency is settled by the database: the partial unique index on open
    attempts, the (attempt, question) unique constraint on answers and a
    conditional UPDATE on completion.
    """

    def __init__(self, db: Session):
        self.db = db
        self.quizzes = QuizService(db)

    # ==================== Start / Resume ====================

    @db_exception
    def start_attempt(self, quiz_id: int, user_id: str) -> Tuple[QuizAttempt, bool]:
        """Return the open attempt for (user, quiz), creating it if needed.

        The boolean is True when a new attempt was created.
        """
        quiz = self.quizzes.get_visible_quiz(quiz_id, user_id)

        if not quiz.questions:
            raise InvalidStateError("Quiz has no questions")

        existing = self._find_open_attempt(quiz_id, user_id)
        if existing:
            logger.info(f"Resuming attempt {existing.id} for user {user_id} on quiz {quiz_id}")
            return existing, False

        attempt = QuizAttempt(
            user_id=user_id,
            quiz_id=quiz_id,
            score=0,
            total_questions=len(quiz.questions),
            percentage=0,
            started_at=datetime.now(timezone.utc),
            completed_at=None,
        )

        try:
            self.db.add(attempt)
            self.db.commit()
        except IntegrityError:
            # A concurrent request created the open attempt first
            self.db.rollback()
            existing = self._find_open_attempt(quiz_id, user_id)
            if existing:
                logger.info(f"Converged on concurrent attempt {existing.id} for user {user_id}")
                return existing, False
            raise

        self.db.refresh(attempt)
        logger.info(f"Started attempt {attempt.id} for user {user_id} on quiz {quiz_id}")
        return attempt, True

    # ==================== Answers ====================

    @db_exception
    def submit_answer(
        self,
        attempt_id: int,
        user_id: str,
        question_id: int,
        selected_option_ids: Iterable[int],
    ) -> Tuple[QuestionAnswer, Question]:
        """Record the one and only answer to a question within an attempt."""
        attempt = self._get_owned_attempt(attempt_id, user_id, for_update=True)

        if attempt.is_completed:
            raise InvalidStateError("Quiz attempt already completed")

        question = self.quizzes.get_question(attempt.quiz_id, question_id)

        selected = sorted(set(selected_option_ids))
        stray = set(selected) - {option.id for option in question.options}
        if stray:
            raise NotFoundError(
                f"Options {sorted(stray)} do not belong to question {question_id}"
            )

        existing = (
            self.db.query(QuestionAnswer.id)
            .filter(
                and_(
                    QuestionAnswer.attempt_id == attempt_id,
                    QuestionAnswer.question_id == question_id,
                )
            )
            .first()
        )
        if existing:
            raise DuplicateAnswerError()

        answer = QuestionAnswer(
            attempt_id=attempt_id,
            question_id=question_id,
            selected_option_ids=selected,
            is_correct=is_correct(
                selected, question.correct_option_ids, question.question_type
            ),
        )

        try:
            self.db.add(answer)
            self.db.commit()
        except IntegrityError:
            # Double submission: the first writer wins
            self.db.rollback()
            raise DuplicateAnswerError()

        self.db.refresh(answer)
        logger.info(
            f"Recorded answer for question {question_id} in attempt {attempt_id} "
            f"(correct={answer.is_correct})"
        )
        return answer, question

    # ==================== Completion ====================

    @db_exception
    def complete_attempt(self, attempt_id: int, user_id: str) -> QuizAttempt:
        """Score the attempt and close it for good."""
        attempt = self._get_owned_attempt(attempt_id, user_id, for_update=True)

        if attempt.is_completed:
            raise AlreadyCompletedError()

        answered_count, correct_count = (
            self.db.query(
                func.count(func.distinct(QuestionAnswer.question_id)),
                func.coalesce(
                    func.sum(case((QuestionAnswer.is_correct.is_(True), 1), else_=0)), 0
                ),
            )
            .filter(QuestionAnswer.attempt_id == attempt_id)
            .one()
        )

        total_questions = attempt.total_questions
        if answered_count < total_questions:
            raise IncompleteAttemptError(
                f"Please answer all questions ({answered_count}/{total_questions})"
            )

        percentage = (
            round(correct_count / total_questions * 100, 2) if total_questions > 0 else 0
        )

        # Only one caller can flip completed_at from NULL
        updated = (
            self.db.query(QuizAttempt)
            .filter(
                and_(
                    QuizAttempt.id == attempt_id,
                    QuizAttempt.completed_at.is_(None),
                )
            )
            .update(
                {
                    QuizAttempt.score: correct_count,
                    QuizAttempt.percentage: percentage,
                    QuizAttempt.completed_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
        )

        if updated != 1:
            self.db.rollback()
            raise AlreadyCompletedError()

        self.db.query(Quiz).filter(Quiz.id == attempt.quiz_id).update(
            {Quiz.attempt_count: Quiz.attempt_count + 1},
            synchronize_session=False,
        )

        self.db.commit()
        self.db.refresh(attempt)

        logger.info(
            f"Completed attempt {attempt_id} for user {user_id}: "
            f"{attempt.score}/{total_questions}"
        )
        return attempt

    # ==================== Reads ====================

    @db_exception
    def get_open_attempt(self, quiz_id: int, user_id: str) -> Optional[QuizAttempt]:
        """Open attempt with its answers, for resuming a quiz."""
        self.quizzes.get_visible_quiz(quiz_id, user_id)
        return self._find_open_attempt(quiz_id, user_id, with_answers=True)

    @db_exception
    def get_attempt_summary(self, attempt_id: int, user_id: str) -> dict:
        """Review of a completed attempt with every correct answer revealed."""
        attempt = (
            self.db.query(QuizAttempt)
            .options(
                selectinload(QuizAttempt.quiz),
                selectinload(QuizAttempt.answers)
                .selectinload(QuestionAnswer.question)
                .selectinload(Question.options),
            )
            .filter(QuizAttempt.id == attempt_id)
            .first()
        )

        if not attempt or attempt.user_id != user_id:
            raise NotFoundError("Attempt not found")

        if not attempt.is_completed:
            raise InvalidStateError("Quiz attempt not completed yet")

        answers = sorted(attempt.answers, key=lambda a: a.question.sequence)

        return {
            "attempt_id": attempt.id,
            "quiz_id": attempt.quiz_id,
            "quiz_title": attempt.quiz.title,
            "score": attempt.score,
            "total_questions": attempt.total_questions,
            "percentage": float(attempt.percentage),
            "completed_at": attempt.completed_at,
            "questions": [
                {
                    "question_id": answer.question.id,
                    "sequence": answer.question.sequence,
                    "question_text": answer.question.question_text,
                    "question_type": answer.question.question_type,
                    "justification": answer.question.justification,
                    "options": [
                        {
                            "id": option.id,
                            "text": option.option_text,
                            "is_correct": option.is_correct,
                        }
                        for option in answer.question.options
                    ],
                    "correct_option_ids": answer.question.correct_option_ids,
                    "selected_option_ids": answer.selected_option_ids,
                    "is_correct": answer.is_correct,
                }
                for answer in answers
            ],
        }

    # ==================== Helpers ====================

    def _find_open_attempt(
        self, quiz_id: int, user_id: str, with_answers: bool = False
    ) -> Optional[QuizAttempt]:
        query = self.db.query(QuizAttempt)
        if with_answers:
            query = query.options(
                selectinload(QuizAttempt.answers)
                .selectinload(QuestionAnswer.question)
                .selectinload(Question.options)
            )

        return query.filter(
            and_(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.user_id == user_id,
                QuizAttempt.completed_at.is_(None),
            )
        ).first()

    def _get_owned_attempt(
        self, attempt_id: int, user_id: str, for_update: bool = False
    ) -> QuizAttempt:
        query = self.db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id)
        if for_update:
            query = query.with_for_update()

        attempt = query.first()
        if not attempt or attempt.user_id != user_id:
            raise NotFoundError("Attempt not found")

        return attempt

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models.quiz import QuizSession, QuizQuestion, OPTION_LETTERS, STATUS_COMPLETED, MAX_TIME_SPENT_SECONDS
from core.exceptions import (
    ValidationError,
    NotFoundError,
    AnswerAlreadySubmittedError,
    QuizAlreadyCompletedError,
)
from core.logger import logger
from services.stats_service import StatsService
from utils.grading import grade_for, score_percentage


class SessionService:
    """Answer submission and completion for an in-progress quiz session."""

    def __init__(self, db: AsyncSession, stats_service: Optional[StatsService] = None):
        self.db = db
        self.stats = stats_service or StatsService(db)

    async def _get_owned_session(self, session_id: int, user_id: int, lock: bool = False) -> Optional[QuizSession]:
        query = select(QuizSession).filter(QuizSession.id == session_id, QuizSession.user_id == user_id)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def submit_answer(self, user_id: int, session_id: int, question_number: int,
                            answer: str, time_spent=0) -> dict:
        if not session_id or not question_number or not answer:
            raise ValidationError("sessionId, questionNumber, and answer are required")

        letter = str(answer).strip().upper()
        if letter not in OPTION_LETTERS:
            raise ValidationError("Answer must be one of A, B, C, or D")

        try:
            seconds = max(int(time_spent or 0), 0)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError("timeSpent must be a finite number")
        if seconds > MAX_TIME_SPENT_SECONDS:
            raise ValidationError(f"timeSpent must be at most {MAX_TIME_SPENT_SECONDS} seconds")

        # Lock order: session row, then question row
        session = await self._get_owned_session(session_id, user_id, lock=True)
        if not session:
            raise NotFoundError("Quiz session not found")
        if session.status == STATUS_COMPLETED:
            raise QuizAlreadyCompletedError()

        result = await self.db.execute(
            select(QuizQuestion)
            .filter(QuizQuestion.session_id == session_id, QuizQuestion.question_number == question_number)
            .with_for_update()
        )
        question = result.scalar_one_or_none()
        if not question:
            raise NotFoundError("Question not found")
        if question.user_answer is not None:
            raise AnswerAlreadySubmittedError()

        is_correct = letter == question.correct_answer.upper()

        question.user_answer = letter
        question.is_correct = is_correct
        question.time_spent_seconds = seconds
        question.answered_at = datetime.utcnow()

        session.answered += 1
        if is_correct:
            session.correct += 1
        else:
            session.wrong += 1
        session.time_taken_seconds += seconds

        await self.db.commit()
        logger.info("Answer submitted", session_id=session_id, question=question_number, correct=is_correct)

        return {
            "isCorrect": is_correct,
            "correctAnswer": question.correct_answer,
            "explanation": question.explanation,
            "yourAnswer": letter,
        }

    async def complete_quiz(self, user_id: int, session_id: int) -> dict:
        """
        Finalize a session from its question rows and fold it into the
        user's performance records. Completing twice returns the stored
        results without counting the attempt again.
        """
        session = await self._get_owned_session(session_id, user_id, lock=True)
        if not session:
            raise NotFoundError("Quiz not found")

        result = await self.db.execute(
            select(QuizQuestion)
            .filter(QuizQuestion.session_id == session_id)
            .order_by(QuizQuestion.question_number)
        )
        questions = list(result.scalars().all())

        if session.status == STATUS_COMPLETED:
            return self._build_results(session, questions)

        # Recount from the question rows; the running counters are not trusted here
        answered = sum(1 for q in questions if q.user_answer is not None)
        correct = sum(1 for q in questions if q.user_answer is not None and q.is_correct)
        wrong = answered - correct

        session.answered = answered
        session.correct = correct
        session.wrong = wrong
        session.skipped = session.total_questions - answered
        session.score_percentage = score_percentage(correct, session.total_questions)
        session.time_taken_seconds = sum(q.time_spent_seconds or 0 for q in questions)
        session.status = STATUS_COMPLETED
        session.completed_at = datetime.utcnow()

        await self.stats.record_quiz_completion(session)
        await self.db.commit()
        logger.info("Quiz completed", user_id=user_id, session_id=session_id,
                    score=session.score_percentage, answered=answered, correct=correct)

        return self._build_results(session, questions)

    @staticmethod
    def _build_results(session: QuizSession, questions: List[QuizQuestion]) -> dict:
        return {
            "sessionId": session.id,
            "subject": session.subject_name,
            "topic": session.topic,
            "difficulty": session.difficulty,
            "totalQuestions": session.total_questions,
            "answered": session.answered,
            "correct": session.correct,
            "wrong": session.wrong,
            "skipped": session.skipped,
            "scorePercentage": session.score_percentage,
            "timeTaken": session.time_taken_seconds,
            "completedAt": session.completed_at,
            "grade": grade_for(session.score_percentage).to_dict(),
            "questions": [{
                "number": q.question_number,
                "question": q.question_text,
                "options": q.options,
                "correctAnswer": q.correct_answer,
                "yourAnswer": q.user_answer,
                "isCorrect": bool(q.is_correct),
                "explanation": q.explanation,
                "timeSpent": q.time_spent_seconds,
                "isBookmarked": bool(q.is_bookmarked),
            } for q in questions],
        }

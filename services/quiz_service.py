from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from models.quiz import QuizSession, QuizQuestion, DIFFICULTIES, STATUS_IN_PROGRESS
from constants.subjects import SUBJECT_TOPICS
from core.config import Settings
from core.exceptions import ValidationError, QuizGenerationError
from core.logger import logger
from services.ai_service import AIService
from services.stats_service import StatsService
from utils.parser import Malformed


def serialize_session(session: QuizSession) -> dict:
    return {
        "id": session.id,
        "user_id": session.user_id,
        "subject_name": session.subject_name,
        "topic": session.topic,
        "difficulty": session.difficulty,
        "total_questions": session.total_questions,
        "answered": session.answered,
        "correct": session.correct,
        "wrong": session.wrong,
        "skipped": session.skipped,
        "time_taken_seconds": session.time_taken_seconds,
        "status": session.status,
        "score_percentage": session.score_percentage,
        "created_at": session.created_at,
        "completed_at": session.completed_at,
    }


class QuizService:
    """Quiz generation plus the read-only catalogue and history views."""

    def __init__(self, db: AsyncSession, ai_service: Optional[AIService], settings: Settings):
        self.db = db
        self.ai = ai_service
        self.settings = settings

    def _clamp_count(self, number_of_questions) -> int:
        try:
            count = int(number_of_questions)
        except (TypeError, ValueError):
            raise ValidationError("numberOfQuestions must be a number")
        return min(max(count, self.settings.MCQ_MIN_QUESTIONS), self.settings.MCQ_MAX_QUESTIONS)

    async def generate_quiz(self, user_id: int, subject: str, topic: str, difficulty: str, number_of_questions) -> dict:
        subject = (subject or "").strip()
        topic = (topic or "").strip()
        if not subject or not topic or not difficulty or number_of_questions in (None, ""):
            raise ValidationError("Subject, topic, difficulty, and numberOfQuestions are required")
        if difficulty not in DIFFICULTIES:
            raise ValidationError("Difficulty must be easy, medium, or hard")
        count = self._clamp_count(number_of_questions)

        # The session exists before generation so a failed attempt still has an id to log
        session = QuizSession(
            user_id=user_id,
            subject_name=subject,
            topic=topic,
            difficulty=difficulty,
            total_questions=count,
            status=STATUS_IN_PROGRESS,
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        logger.info("Quiz session created", user_id=user_id, session_id=session.id, requested=count)

        try:
            outcome = await self.ai.generate_mcq_questions(subject, topic, difficulty, count)
        except Exception:
            await self._discard_session(session.id)
            raise

        if isinstance(outcome, Malformed):
            logger.warning("Quiz generation produced no usable questions",
                           session_id=session.id, reason=outcome.reason)
            await self._discard_session(session.id)
            raise QuizGenerationError()

        questions = outcome.questions
        for number, q in enumerate(questions, 1):
            self.db.add(QuizQuestion(
                session_id=session.id,
                question_number=number,
                question_text=q.question,
                option_a=q.options["A"],
                option_b=q.options["B"],
                option_c=q.options["C"],
                option_d=q.options["D"],
                correct_answer=q.correct,
                explanation=q.explanation,
                difficulty=difficulty,
            ))
        session.total_questions = len(questions)
        await self.db.commit()
        logger.info("Quiz generated", user_id=user_id, session_id=session.id, total=len(questions))

        # Answers and explanations stay server-side until submission
        return {
            "sessionId": session.id,
            "subject": subject,
            "topic": topic,
            "difficulty": difficulty,
            "totalQuestions": len(questions),
            "questions": [
                {"id": number, "question": q.question, "options": dict(q.options)}
                for number, q in enumerate(questions, 1)
            ],
        }

    async def _discard_session(self, session_id: int):
        await self.db.execute(delete(QuizSession).where(QuizSession.id == session_id))
        await self.db.commit()
        logger.info("Discarded failed quiz session", session_id=session_id)

    async def get_history(self, user_id: int, subject: Optional[str] = None,
                          difficulty: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
        if not limit or limit <= 0:
            limit = self.settings.HISTORY_DEFAULT_LIMIT

        query = select(QuizSession).filter(QuizSession.user_id == user_id)
        if subject:
            query = query.filter(QuizSession.subject_name == subject)
        if difficulty:
            query = query.filter(QuizSession.difficulty == difficulty)
        query = query.order_by(QuizSession.created_at.desc(), QuizSession.id.desc()).limit(limit)

        result = await self.db.execute(query)
        return [serialize_session(s) for s in result.scalars().all()]

    async def get_subjects_with_topics(self, user_id: int) -> List[dict]:
        summaries = await StatsService(self.db).get_subject_summaries(user_id)
        empty = {"quizzesTaken": 0, "avgAccuracy": 0, "totalQuestions": 0}
        return [{
            "name": name,
            "topicCount": len(topics),
            "topics": list(topics),
            "performance": summaries.get(name, empty),
        } for name, topics in SUBJECT_TOPICS.items()]

    async def get_topics(self, user_id: int, subject: str) -> dict:
        defaults = SUBJECT_TOPICS.get(subject, [])

        # Custom topics the user has practised under this subject
        query = (
            select(QuizSession.topic)
            .filter(QuizSession.user_id == user_id, QuizSession.subject_name == subject)
            .distinct()
            .order_by(QuizSession.topic)
        )
        if defaults:
            query = query.filter(QuizSession.topic.notin_(defaults))
        custom = (await self.db.execute(query)).scalars().all()

        topics = [{"name": t, "isDefault": True} for t in defaults]
        topics.extend({"name": t, "isDefault": False} for t in custom)
        return {"subject": subject, "topics": topics, "totalTopics": len(topics)}

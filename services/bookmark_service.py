from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from models.quiz import QuizSession, QuizQuestion
from models.bookmark import Bookmark
from core.exceptions import NotFoundError, ValidationError
from core.logger import logger


def serialize_bookmark(bookmark: Bookmark) -> dict:
    return {
        "id": bookmark.id,
        "question_text": bookmark.question_text,
        "option_a": bookmark.option_a,
        "option_b": bookmark.option_b,
        "option_c": bookmark.option_c,
        "option_d": bookmark.option_d,
        "correct_answer": bookmark.correct_answer,
        "explanation": bookmark.explanation,
        "subject_name": bookmark.subject_name,
        "topic": bookmark.topic,
        "difficulty": bookmark.difficulty,
        "created_at": bookmark.created_at,
    }


class BookmarkService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle_bookmark(self, user_id: int, session_id: int, question_number: int) -> bool:
        """
        Flip a question's bookmark flag and mirror it into the bookmarks
        table. Returns the new bookmarked state.
        """
        if not session_id or not question_number:
            raise ValidationError("sessionId and questionNumber are required")

        result = await self.db.execute(
            select(QuizQuestion, QuizSession)
            .join(QuizSession, QuizQuestion.session_id == QuizSession.id)
            .filter(
                QuizQuestion.session_id == session_id,
                QuizQuestion.question_number == question_number,
                QuizSession.user_id == user_id,
            )
        )
        row = result.first()
        if not row:
            raise NotFoundError("Question not found")
        question, session = row

        question.is_bookmarked = not question.is_bookmarked

        existing = (await self.db.execute(
            select(Bookmark.id).filter(
                Bookmark.user_id == user_id,
                Bookmark.question_text == question.question_text,
            )
        )).scalars().all()

        if question.is_bookmarked and not existing:
            self.db.add(Bookmark(
                user_id=user_id,
                question_text=question.question_text,
                option_a=question.option_a,
                option_b=question.option_b,
                option_c=question.option_c,
                option_d=question.option_d,
                correct_answer=question.correct_answer,
                explanation=question.explanation,
                subject_name=session.subject_name,
                topic=session.topic,
                difficulty=question.difficulty,
            ))
        elif not question.is_bookmarked and existing:
            await self.db.execute(delete(Bookmark).where(Bookmark.id.in_(existing)))

        await self.db.commit()
        logger.info("Bookmark toggled", user_id=user_id, session_id=session_id,
                    question=question_number, bookmarked=question.is_bookmarked)
        return question.is_bookmarked

    async def get_bookmarks(self, user_id: int, subject: Optional[str] = None) -> List[dict]:
        query = select(Bookmark).filter(Bookmark.user_id == user_id)
        if subject:
            query = query.filter(Bookmark.subject_name == subject)
        query = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())

        result = await self.db.execute(query)
        return [serialize_bookmark(b) for b in result.scalars().all()]

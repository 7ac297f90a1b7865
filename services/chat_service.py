from datetime import datetime
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from models.chat import ChatSession, ChatMessage
from constants.prompts import CHAT_MODE_PROMPTS, get_system_prompt, get_mode_label
from core.config import Settings
from core.exceptions import NotFoundError, ValidationError
from core.logger import logger
from services.ai_service import AIService
from services.stats_service import StatsService

DEFAULT_SUBJECT = "General"
DEFAULT_MODE = "normal"
SESSION_LIST_LIMIT = 50


def serialize_chat_session(session: ChatSession, message_count: Optional[int] = None) -> dict:
    data = {
        "id": session.id,
        "subject_name": session.subject_name,
        "mode": session.mode,
        "title": session.title,
        "created_at": session.created_at,
        "updated_at": session.updated_at,
    }
    if message_count is not None:
        data["message_count"] = message_count
    return data


def serialize_message(message: ChatMessage) -> dict:
    return {
        "id": message.id,
        "role": message.role,
        "content": message.content,
        "tokens_used": message.tokens_used,
        "created_at": message.created_at,
    }


class ChatService:
    """Tutoring conversations: session bookkeeping and AI context assembly."""

    def __init__(self, db: AsyncSession, ai_service: Optional[AIService], settings: Settings):
        self.db = db
        self.ai = ai_service
        self.settings = settings

    @staticmethod
    def _mode(mode: Optional[str]) -> str:
        return mode if mode in CHAT_MODE_PROMPTS else DEFAULT_MODE

    async def create_session(self, user_id: int, subject_name: Optional[str] = None,
                             mode: Optional[str] = None, title: Optional[str] = None) -> ChatSession:
        subject_name = subject_name or DEFAULT_SUBJECT
        session = ChatSession(
            user_id=user_id,
            subject_name=subject_name,
            mode=self._mode(mode),
            title=title or f"{subject_name} - New Chat",
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        logger.info("Chat session created", user_id=user_id, session_id=session.id)
        return session

    async def get_owned_session(self, user_id: int, session_id: int) -> ChatSession:
        result = await self.db.execute(
            select(ChatSession).filter(ChatSession.id == session_id, ChatSession.user_id == user_id)
        )
        session = result.scalar_one_or_none()
        if not session:
            raise NotFoundError("Chat session not found")
        return session

    async def _context_messages(self, session_id: int, exclude_id: int) -> List[dict]:
        # Most recent messages, oldest first, without the one being answered
        result = await self.db.execute(
            select(ChatMessage)
            .filter(
                ChatMessage.session_id == session_id,
                ChatMessage.id != exclude_id,
                ChatMessage.role != "system",
            )
            .order_by(ChatMessage.id.desc())
            .limit(self.settings.CHAT_HISTORY_LIMIT)
        )
        history = reversed(result.scalars().all())
        return [{"role": m.role, "content": m.content} for m in history]

    async def send_message(self, user_id: int, message: str, session_id: Optional[int] = None,
                           mode: Optional[str] = None, subject: Optional[str] = None) -> dict:
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")

        if session_id:
            session = await self.get_owned_session(user_id, session_id)
        else:
            session = await self.create_session(user_id, subject, mode, title=message[:100])

        user_message = ChatMessage(session_id=session.id, role="user", content=message)
        self.db.add(user_message)
        await self.db.commit()
        await self.db.refresh(user_message)

        history = await self._context_messages(session.id, exclude_id=user_message.id)
        system_prompt = get_system_prompt(self._mode(mode or session.mode), subject or session.subject_name)

        reply = await self.ai.chat_reply(system_prompt, history, message)

        self.db.add(ChatMessage(
            session_id=session.id,
            role="assistant",
            content=reply.content,
            tokens_used=reply.tokens_used,
        ))

        # First exchange names the conversation
        if not history:
            session.title = message if len(message) <= 80 else message[:80] + "..."
        session.updated_at = datetime.utcnow()

        await StatsService(self.db).add_study_activity(user_id, subject or session.subject_name, 1)
        await self.db.commit()
        logger.info("Chat reply stored", user_id=user_id, session_id=session.id, tokens=reply.tokens_used)

        return {
            "session_id": session.id,
            "message": reply.content,
            "tokens_used": reply.tokens_used,
        }

    async def list_sessions(self, user_id: int) -> List[dict]:
        result = await self.db.execute(
            select(ChatSession, func.count(ChatMessage.id).label("message_count"))
            .outerjoin(ChatMessage, ChatMessage.session_id == ChatSession.id)
            .filter(ChatSession.user_id == user_id)
            .group_by(ChatSession.id)
            .order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
            .limit(SESSION_LIST_LIMIT)
        )
        return [serialize_chat_session(s, count) for s, count in result.all()]

    async def _messages(self, session_id: int) -> List[ChatMessage]:
        result = await self.db.execute(
            select(ChatMessage).filter(ChatMessage.session_id == session_id).order_by(ChatMessage.id)
        )
        return list(result.scalars().all())

    async def get_session_messages(self, user_id: int, session_id: int) -> dict:
        session = await self.get_owned_session(user_id, session_id)
        messages = await self._messages(session.id)
        return {
            "session": serialize_chat_session(session),
            "messages": [serialize_message(m) for m in messages],
        }

    async def delete_session(self, user_id: int, session_id: int):
        session = await self.get_owned_session(user_id, session_id)
        # Delete messages first to avoid foreign key constraints
        await self.db.execute(delete(ChatMessage).where(ChatMessage.session_id == session.id))
        await self.db.execute(delete(ChatSession).where(ChatSession.id == session.id))
        await self.db.commit()
        logger.info("Chat session deleted", user_id=user_id, session_id=session_id)

    async def export_chat(self, user_id: int, session_id: int) -> dict:
        session = await self.get_owned_session(user_id, session_id)
        messages = await self._messages(session.id)
        return {
            "title": session.title or "Chat Export",
            "subject": session.subject_name,
            "mode": session.mode,
            "mode_label": get_mode_label(session.mode),
            "messages": [
                {"role": m.role, "content": m.content, "created_at": m.created_at} for m in messages
            ],
            "exported_at": datetime.utcnow(),
        }

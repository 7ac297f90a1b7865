from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import Settings
from core.exceptions import AuthError
from core.logger import logger
from core.security import verify_token
from db.session import get_db
from services.ai_service import AIService
from services.bookmark_service import BookmarkService
from services.chat_service import ChatService
from services.quiz_service import QuizService
from services.session_service import SessionService
from services.stats_service import StatsService
from services.user_service import UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_auth_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> int:
    settings = request.app.state.settings

    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    elif x_auth_token:
        token = x_auth_token

    user_id = verify_token(token, settings.SECRET_KEY, settings.TOKEN_TTL_SECONDS)
    if user_id is None:
        logger.warning("Auth failed: Missing or invalid credentials", path=request.url.path)
        raise AuthError()

    user = await UserService(db).get_active_user(user_id)
    if not user:
        logger.warning("Auth failed: Unknown or inactive user", user_id=user_id)
        raise AuthError()
    return user.id


def get_quiz_service(
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
    settings: Settings = Depends(get_settings),
) -> QuizService:
    return QuizService(db, ai, settings)


def get_session_service(db: AsyncSession = Depends(get_db)) -> SessionService:
    return SessionService(db)


def get_stats_service(db: AsyncSession = Depends(get_db)) -> StatsService:
    return StatsService(db)


def get_bookmark_service(db: AsyncSession = Depends(get_db)) -> BookmarkService:
    return BookmarkService(db)


def get_chat_service(
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
    settings: Settings = Depends(get_settings),
) -> ChatService:
    return ChatService(db, ai, settings)

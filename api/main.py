from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException
from api import chat, mcq
from core.config import Settings, get_settings
from core.exceptions import AppError
from core.logger import logger
from db.session import build_engine, build_sessionmaker, build_redis
from services.ai_service import AIService
from utils.middleware import RequestLoggingMiddleware

# API Documentation
API_DESCRIPTION = """
## Study Buddy API

AI tutoring chat and multiple choice quiz practice.

### Authentication

All `/api/mcq` and `/api/chat` endpoints require a signed user token:

- Header: `Authorization: Bearer <token>`
- Or: `X-Auth-Token: <token>`

### Response format

Every response is `{"success": bool, "data": ..., "message": ...}`.
"""

TAGS_METADATA = [
    {
        "name": "mcq",
        "description": "Quiz generation, answering, results, analytics and bookmarks.",
    },
    {
        "name": "chat",
        "description": "AI tutor conversations.",
    },
]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=type(exc).__name__, message=exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else "Invalid request"
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return _error(500, "Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    ai_service: Optional[AIService] = None,
    sessionmaker: Optional[async_sessionmaker] = None,
    redis: Optional[Redis] = None,
) -> FastAPI:
    """
    Build the application. Anything not passed in is constructed from
    settings and disposed of on shutdown.
    """
    settings = settings or get_settings()
    engine = None
    owns_ai = ai_service is None
    owns_redis = redis is None

    if sessionmaker is None:
        engine = build_engine(settings)
        sessionmaker = build_sessionmaker(engine)
    if ai_service is None:
        ai_service = AIService.from_settings(settings)
    if redis is None:
        redis = build_redis(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("API starting", env=settings.ENV)
        yield
        if owns_ai:
            await ai_service.close()
        if owns_redis and redis is not None:
            await redis.aclose()
        if engine is not None:
            await engine.dispose()
        logger.info("API stopped")

    app = FastAPI(
        title="Study Buddy API",
        description=API_DESCRIPTION,
        version="1.0.0",
        openapi_tags=TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sessionmaker = sessionmaker
    app.state.ai_service = ai_service
    app.state.redis = redis

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(mcq.router)
    app.include_router(chat.router)

    @app.get("/api/health", include_in_schema=False)
    async def health():
        return {
            "success": True,
            "message": "Study Buddy API is running!",
            "timestamp": datetime.utcnow().isoformat(),
        }

    return app

from typing import AsyncIterator, Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from redis.asyncio import Redis
from core.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    # PostgreSQL driver for async operations is asyncpg
    options = dict(echo=False, pool_pre_ping=True, future=True)
    if settings.DATABASE_URL.startswith("postgresql"):
        options.update(
            pool_recycle=3600,
            pool_size=settings.DB_POOL_SIZE,       # Base connections
            max_overflow=settings.DB_MAX_OVERFLOW, # Burst connections
        )
    return create_async_engine(settings.DATABASE_URL, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def build_redis(settings: Settings) -> Optional[Redis]:
    if not settings.REDIS_URL:
        return None
    return Redis.from_url(settings.REDIS_URL, decode_responses=True)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.close()


def get_redis(request: Request) -> Optional[Redis]:
    return request.app.state.redis

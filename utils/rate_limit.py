from typing import Optional
from redis.asyncio import Redis
from core.exceptions import RateLimitError
from core.logger import logger


async def enforce_rate_limit(redis: Optional[Redis], key: str, limit: int, window_seconds: int = 60):
    """Fixed-window counter: at most ``limit`` hits per ``window_seconds`` for ``key``."""
    if redis is None or limit <= 0:
        return

    current = await redis.incr(key)
    if current == 1:
        await redis.expire(key, window_seconds)

    if current > limit:
        logger.warning("Rate limit reached", key=key, count=current, limit=limit)
        raise RateLimitError()


async def enforce_ai_rate_limit(redis: Optional[Redis], user_id: int, limit: int):
    await enforce_rate_limit(redis, f"rl:ai:{user_id}", limit)

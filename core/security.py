import hmac
import hashlib
import time
from typing import Optional
from core.logger import logger


def _sign(secret: str, data: str) -> str:
    return hmac.new(secret.encode(), data.encode(), hashlib.sha256).hexdigest()


def create_token(user_id: int, secret: str, timestamp: Optional[int] = None) -> str:
    """Issue a signed token in the format {user_id}:{timestamp}:{signature}."""
    ts = int(time.time()) if timestamp is None else timestamp
    data = f"{user_id}:{ts}"
    return f"{data}:{_sign(secret, data)}"


def verify_token(token: str, secret: str, ttl_seconds: int) -> Optional[int]:
    """
    Verify a signed user token and return the user id.
    Returns None for malformed, expired or tampered tokens.
    """
    if not token:
        return None

    parts = token.split(':')
    if len(parts) != 3:
        return None

    user_id_str, timestamp_str, signature = parts
    if not user_id_str.isdigit() or not timestamp_str.isdigit():
        return None

    if int(time.time()) - int(timestamp_str) > ttl_seconds:
        logger.warning("Token expired", user_id=user_id_str)
        return None

    expected_signature = _sign(secret, f"{user_id_str}:{timestamp_str}")
    if hmac.compare_digest(expected_signature, signature):
        return int(user_id_str)

    logger.warning("Token signature mismatch", user_id=user_id_str)
    return None

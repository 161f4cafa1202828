"""Rate limiting for the public widget write endpoints."""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from squeak.core.config import settings


def _storage_uri() -> str:
    # Try Redis, fall back to memory if connection fails
    if not settings.REDIS_URL:
        return "memory://"
    try:
        import redis

        r = redis.from_url(settings.REDIS_URL, socket_connect_timeout=1)
        r.ping()
        return settings.REDIS_URL
    except Exception as e:
        logging.warning(f"Redis unavailable for rate limiting, using in-memory: {e}")
        return "memory://"


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_storage_uri() if settings.RATE_LIMIT_ENABLED else "memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)

QUESTION_LIMIT = f"{settings.RATE_LIMIT_QUESTION}/minute"
REGISTER_LIMIT = f"{settings.RATE_LIMIT_REGISTER}/minute"

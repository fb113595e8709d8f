import logging
from typing import Any

import redis.asyncio as redis

logger = logging.getLogger(__name__)

RedisClient = redis.Redis


def get_redis_client(redis_url: str, **kwargs: Any) -> redis.Redis | None:
    """Build an async client, or ``None`` when no URL is configured.

    Redis only backs best-effort caches, so a missing URL disables caching
    instead of failing startup.
    """
    if not redis_url:
        logger.info("REDIS_URL not set, caching disabled")
        return None
    return redis.from_url(redis_url, decode_responses=True, **kwargs)

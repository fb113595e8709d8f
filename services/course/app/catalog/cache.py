"""Redis cache for the public course outline.

Key schema
----------
catalog:course:{course_id}:outline     String TTL=settings   course + preview items (JSON)

The outline is what anonymous and non-enrolled callers see, so it is the
same for every such viewer. Author writes drop the key.

All functions are best-effort: Redis failures are logged and reported as
a cache miss.
"""

from __future__ import annotations

import logging
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def _outline_key(course_id: UUID) -> str:
    return f"catalog:course:{course_id}:outline"


async def get_outline(course_id: UUID, redis: Redis | None) -> str | None:
    if redis is None:
        return None
    try:
        return await redis.get(_outline_key(course_id))
    except RedisError:
        logger.warning("Outline cache read failed for course %s", course_id, exc_info=True)
        return None


async def set_outline(course_id: UUID, payload: str, ttl_secs: int, redis: Redis | None) -> None:
    if redis is None or ttl_secs <= 0:
        return
    try:
        await redis.set(_outline_key(course_id), payload, ex=ttl_secs)
    except RedisError:
        logger.warning("Outline cache write failed for course %s", course_id, exc_info=True)


async def invalidate_outline(course_id: UUID, redis: Redis | None) -> None:
    if redis is None:
        return
    try:
        await redis.delete(_outline_key(course_id))
    except RedisError:
        logger.warning("Outline cache invalidation failed for course %s", course_id, exc_info=True)

from shared.database.postgres import (
    AsyncSessionFactory,
    Base,
    build_session_factory,
    get_async_engine,
    get_async_session_factory,
    get_session,
)
from shared.database.redis_client import RedisClient, get_redis_client

__all__ = [
    "AsyncSessionFactory",
    "Base",
    "build_session_factory",
    "get_async_engine",
    "get_async_session_factory",
    "get_session",
    "RedisClient",
    "get_redis_client",
]

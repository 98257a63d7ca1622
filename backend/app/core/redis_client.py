"""
Redis cache for job board read models

Values are stored as JSON under keys namespaced with CACHE_PREFIX. The cache
is best effort: Redis errors are logged and reported as a miss, callers fall
back to the database.
"""
import json
from typing import Any, Optional

import redis
import structlog

from app.core.config import settings

logger = structlog.get_logger()

CACHE_PREFIX = "jobboard"

_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    """Shared client, connections are opened on first command"""
    global _client
    if _client is None:
        _client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            health_check_interval=30,
        )
    return _client


def cache_key(*parts: Any) -> str:
    """jobboard:<part>:<part>..."""
    return ":".join([CACHE_PREFIX, *(str(part) for part in parts)])


def get_cache(key: str) -> Optional[Any]:
    """Cached value, None on a miss or when Redis is unavailable"""
    try:
        value = get_redis().get(key)
    except redis.RedisError as e:
        logger.warning("cache_get_error", key=key, error=str(e))
        return None
    if value is None:
        return None
    try:
        return json.loads(value)
    except ValueError:
        logger.warning("cache_value_corrupt", key=key)
        return None


def set_cache(key: str, value: Any, ttl: Optional[int] = None) -> bool:
    try:
        serialized = json.dumps(value, default=str)
        return bool(get_redis().setex(key, ttl or settings.REDIS_CACHE_TTL, serialized))
    except redis.RedisError as e:
        logger.warning("cache_set_error", key=key, error=str(e))
        return False


def delete_cache(key: str) -> bool:
    try:
        return bool(get_redis().delete(key))
    except redis.RedisError as e:
        logger.warning("cache_delete_error", key=key, error=str(e))
        return False

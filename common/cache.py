# common/cache.py
import json
import logging
from typing import Any, Optional

import redis

from .settings import get_settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Return a Redis client if REDIS_URL is configured, otherwise None.
    Fails gracefully (no caching) if Redis is not reachable.
    """
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = get_settings().redis_url
    if not redis_url:
        return None

    try:
        client = redis.from_url(redis_url, decode_responses=True)
        client.ping()
    except redis.RedisError:
        logger.warning("Redis at %s is not reachable; caching disabled", redis_url)
        return None

    _redis_client = client
    return _redis_client


def get_cached_json(key: str) -> Optional[Any]:
    """
    Return the cached value for ``key``, or None on a miss or Redis error.
    """
    client = get_redis_client()
    if client is None:
        return None

    try:
        raw = client.get(key)
    except redis.RedisError as exc:
        logger.warning("Cache read for %s failed: %s", key, exc)
        return None
    if raw is None:
        return None
    return json.loads(raw)


def set_cached_json(key: str, value: Any, ttl_seconds: int = 60) -> None:
    client = get_redis_client()
    if client is None:
        return

    try:
        client.setex(key, ttl_seconds, json.dumps(value, default=str))
    except redis.RedisError as exc:
        logger.warning("Cache write for %s failed: %s", key, exc)


def delete_key(key: str) -> None:
    """
    Delete exactly one key. No pattern matching, so invalidating
    'bookings:user:1' leaves 'bookings:user:10' alone.
    """
    client = get_redis_client()
    if client is None:
        return

    try:
        client.delete(key)
    except redis.RedisError as exc:
        logger.warning("Cache delete for %s failed: %s", key, exc)


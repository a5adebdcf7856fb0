"""
Redis client with fallback.

Returns None when Redis is not configured or unreachable; callers check
for None and keep using their process-local / DB path.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_redis_available: Optional[bool] = None

# every call is bounded; a hung Redis must not hang a login request
SOCKET_TIMEOUT_SECONDS = 5


def _build_client() -> Optional[redis.Redis]:
    url = os.getenv("REDIS_URL")
    if url:
        return redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
        )

    host = os.getenv("REDIS_HOST")
    if not host:
        return None

    return redis.Redis(
        host=host,
        port=int(os.getenv("REDIS_PORT", "6379")),
        password=os.getenv("REDIS_PASSWORD") or None,
        db=int(os.getenv("REDIS_DB", "0")),
        decode_responses=True,
        socket_timeout=SOCKET_TIMEOUT_SECONDS,
        socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
    )


def get_redis_client() -> Optional[redis.Redis]:
    """
    Shared Redis client.
    None if REDIS_URL / REDIS_HOST are unset or the first ping fails.
    """
    global _redis_client, _redis_available

    if _redis_available is False:
        return None

    if _redis_client is not None:
        return _redis_client

    client = _build_client()
    if client is None:
        logger.debug("REDIS_URL / REDIS_HOST not set, Redis disabled")
        _redis_available = False
        return None

    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning("Redis connection failed (using process-local fallback): %s", e)
        _redis_available = False
        return None

    _redis_client = client
    _redis_available = True
    logger.info("Redis connected")
    return client


def is_redis_available() -> bool:
    return get_redis_client() is not None


def reset_redis_state():
    """Tests only: forget the cached client."""
    global _redis_client, _redis_available
    _redis_client = None
    _redis_available = None

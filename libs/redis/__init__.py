"""
Optional Redis layer.

Used only where state has to be shared between API processes (the login
rate limiter when LOGIN_RATE_LIMIT["BACKEND"] == "redis"). When Redis is
not configured the callers stay on their process-local implementation.
"""

from libs.redis.client import get_redis_client, is_redis_available, reset_redis_state

__all__ = [
    "get_redis_client",
    "is_redis_available",
    "reset_redis_state",
]

# PATH: apps/core/services/login_throttle.py
"""
Process-wide login rate limiter, built once from settings.LOGIN_RATE_LIMIT.

BACKEND:
- "memory" (default): process-local, resets on restart, not shared
  between instances. Fine for a single API process only.
- "redis": shared across instances; falls back to memory (with a
  warning) when Redis is not configured or unreachable.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from django.conf import settings

from libs.ratelimit import MemoryRateLimitStore, RateLimiter, RedisRateLimitStore
from libs.redis import get_redis_client

logger = logging.getLogger(__name__)

_limiter: Optional[RateLimiter] = None
_limiter_lock = threading.Lock()

DEFAULTS = {
    "BACKEND": "memory",
    "MAX_ATTEMPTS": 5,
    "WINDOW_SECONDS": 300,
    "LOCKOUT_SECONDS": 300,
    "MAX_LOCKOUT_SECONDS": 3600,
    "MIN_INTERVAL_SECONDS": 0,
    "ESCALATION_RESET_SECONDS": 86400,
    "MAX_ENTRIES": 10000,
    "REDIS_PREFIX": "ratelimit:login:",
}


def _conf() -> dict:
    conf = dict(DEFAULTS)
    conf.update(getattr(settings, "LOGIN_RATE_LIMIT", {}) or {})
    return conf


def _build_store(conf: dict):
    backend = str(conf["BACKEND"]).lower()
    if backend == "redis":
        client = get_redis_client()
        if client is not None:
            return RedisRateLimitStore(client, prefix=conf["REDIS_PREFIX"])
        logger.warning("LOGIN_RATE_LIMIT BACKEND=redis but Redis unavailable; using memory store")
    elif backend != "memory":
        raise ValueError(f"unknown LOGIN_RATE_LIMIT BACKEND: {backend}")
    return MemoryRateLimitStore(max_entries=int(conf["MAX_ENTRIES"]))


def build_login_rate_limiter() -> RateLimiter:
    conf = _conf()
    return RateLimiter(
        max_attempts=int(conf["MAX_ATTEMPTS"]),
        window_seconds=float(conf["WINDOW_SECONDS"]),
        lockout_seconds=float(conf["LOCKOUT_SECONDS"]),
        max_lockout_seconds=float(conf["MAX_LOCKOUT_SECONDS"]),
        min_interval_seconds=float(conf["MIN_INTERVAL_SECONDS"]),
        escalation_reset_seconds=float(conf["ESCALATION_RESET_SECONDS"]),
        store=_build_store(conf),
    )


def get_login_rate_limiter() -> RateLimiter:
    global _limiter
    if _limiter is None:
        with _limiter_lock:
            if _limiter is None:
                _limiter = build_login_rate_limiter()
    return _limiter


def reset_login_rate_limiter() -> None:
    """Tests only: drop the shared limiter so the next call rebuilds it."""
    global _limiter
    with _limiter_lock:
        _limiter = None

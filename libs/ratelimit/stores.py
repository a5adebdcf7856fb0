"""
Rate limit stores.

Contract (both stores):
- get(key, now)        -> RateLimitEntry | None
- mutate(key, fn, now) -> entry returned by fn, written atomically
- delete(key)

fn receives the current entry (or None) and returns the new entry
(or None to drop it). The whole read-modify-write is atomic per key.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Dict, Optional

import redis

from libs.ratelimit.entry import RateLimitEntry

logger = logging.getLogger(__name__)

Mutator = Callable[[Optional[RateLimitEntry]], Optional[RateLimitEntry]]


class MemoryRateLimitStore:
    """
    Process-local store.

    Not persisted and not shared between processes: a restart forgets
    every lockout, and each gunicorn worker counts on its own. Only
    suitable for single-instance deployments; use RedisRateLimitStore
    behind a load balancer.
    """

    def __init__(self, *, max_entries: int = 10000):
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self.max_entries = int(max_entries)

    def __len__(self):
        return len(self._entries)

    def get(self, key: str, now: float) -> Optional[RateLimitEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(now):
                del self._entries[key]
                return None
            return entry

    def mutate(self, key: str, fn: Mutator, now: float) -> Optional[RateLimitEntry]:
        with self._lock:
            current = self._entries.get(key)
            if current is not None and current.is_expired(now):
                current = None

            updated = fn(current)
            if updated is None:
                self._entries.pop(key, None)
            else:
                self._entries[key] = updated

            if len(self._entries) > self.max_entries:
                self._sweep(now)
            return updated

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("rate limit sweep dropped %s entries", len(expired))


class RedisRateLimitStore:
    """
    Shared store: one JSON value per identifier, TTL = entry.expires_at.

    mutate() runs under WATCH/MULTI so concurrent API processes cannot
    lose each other's failures. Redis errors are logged and the limiter
    fails open (login keeps working while Redis is down).
    """

    def __init__(self, client: redis.Redis, *, prefix: str = "ratelimit:login:"):
        self._client = client
        self.prefix = prefix

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str, now: float) -> Optional[RateLimitEntry]:
        try:
            raw = self._client.get(self._k(key))
        except redis.RedisError as e:
            logger.warning("Redis rate limit get failed key=%s: %s", key, e)
            return None
        if not raw:
            return None
        entry = RateLimitEntry.from_json(raw)
        return None if entry.is_expired(now) else entry

    def mutate(self, key: str, fn: Mutator, now: float) -> Optional[RateLimitEntry]:
        rkey = self._k(key)

        def _tx(pipe):
            raw = pipe.get(rkey)
            current = RateLimitEntry.from_json(raw) if raw else None
            if current is not None and current.is_expired(now):
                current = None

            updated = fn(current)
            pipe.multi()
            if updated is None:
                pipe.delete(rkey)
            else:
                ttl = max(1, int(math.ceil(updated.expires_at - now)))
                pipe.set(rkey, updated.to_json(), ex=ttl)
            return updated

        try:
            return self._client.transaction(_tx, rkey, value_from_callable=True)
        except redis.RedisError as e:
            logger.warning("Redis rate limit update failed key=%s: %s", key, e)
            return None

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._k(key))
        except redis.RedisError as e:
            logger.warning("Redis rate limit delete failed key=%s: %s", key, e)

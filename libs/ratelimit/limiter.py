"""
Sliding-window rate limiter with escalating lockouts.

- failures are counted per key inside a trailing window
- reaching max_attempts locks the key; the n-th lockout lasts
  lockout_seconds * 2**(n-1), capped at max_lockout_seconds
- a successful attempt clears the key entirely
- lockout history is forgotten after escalation_reset_seconds of silence
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from libs.ratelimit.entry import RateLimitEntry
from libs.ratelimit.stores import MemoryRateLimitStore

logger = logging.getLogger(__name__)

ANONYMOUS_KEY = "anonymous"


def normalize_key(identifier: Optional[str]) -> str:
    """Login identifier -> limiter key (emails are case-insensitive)."""
    value = (identifier or "").strip().lower()
    return value or ANONYMOUS_KEY


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    message: Optional[str] = None
    wait_seconds: Optional[float] = None


def _locked_message(wait_seconds: float) -> str:
    minutes = max(1, int(math.ceil(wait_seconds / 60.0)))
    unit = "minute" if minutes == 1 else "minutes"
    return f"Too many failed attempts. Try again in {minutes} {unit}."


class RateLimiter:
    def __init__(
        self,
        *,
        max_attempts: int = 5,
        window_seconds: float = 300,
        lockout_seconds: float = 300,
        max_lockout_seconds: float = 3600,
        min_interval_seconds: float = 0,
        escalation_reset_seconds: float = 86400,
        store=None,
        clock: Callable[[], float] = time.time,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = int(max_attempts)
        self.window_seconds = float(window_seconds)
        self.lockout_seconds = float(lockout_seconds)
        self.max_lockout_seconds = max(float(max_lockout_seconds), self.lockout_seconds)
        self.min_interval_seconds = float(min_interval_seconds)
        self.escalation_reset_seconds = float(escalation_reset_seconds)
        self.store = store if store is not None else MemoryRateLimitStore()
        self._clock = clock

    # --------------------------------------------------
    # policy
    # --------------------------------------------------

    def lockout_duration(self, lockout_number: int) -> float:
        """Length of the n-th consecutive lockout (1-based)."""
        n = max(1, int(lockout_number))
        # 2**n overflows float long before the cap matters
        factor = 2.0 ** min(n - 1, 62)
        return min(self.lockout_seconds * factor, self.max_lockout_seconds)

    def _stamp_expiry(self, entry: RateLimitEntry, now: float) -> RateLimitEntry:
        horizon = max(
            entry.locked_until or now,
            (entry.last_failure_at or now) + self.window_seconds,
        )
        entry.expires_at = horizon + self.escalation_reset_seconds
        return entry

    # --------------------------------------------------
    # public API
    # --------------------------------------------------

    def can_attempt(self, key: str) -> RateLimitDecision:
        key = normalize_key(key)
        now = self._clock()
        entry = self.store.get(key, now)
        if entry is None:
            return RateLimitDecision(allowed=True)

        if entry.is_locked(now):
            wait = entry.locked_until - now
            return RateLimitDecision(
                allowed=False,
                message=_locked_message(wait),
                wait_seconds=wait,
            )

        if self.min_interval_seconds > 0 and entry.last_failure_at is not None:
            gap = now - entry.last_failure_at
            if 0 <= gap < self.min_interval_seconds:
                return RateLimitDecision(
                    allowed=False,
                    message="Please wait a moment before trying again.",
                    wait_seconds=self.min_interval_seconds - gap,
                )

        return RateLimitDecision(allowed=True)

    def record_attempt(self, key: str, success: bool = False) -> Optional[RateLimitEntry]:
        key = normalize_key(key)
        if success:
            self.store.delete(key)
            return None

        now = self._clock()

        def _apply(entry: Optional[RateLimitEntry]) -> RateLimitEntry:
            if entry is None:
                entry = RateLimitEntry(key=key)

            # failures while locked do not extend the lock
            if entry.is_locked(now):
                return entry

            window_start = now - self.window_seconds
            entry.failures = [t for t in entry.failures if t > window_start]
            entry.failures.append(now)
            entry.last_failure_at = now

            if len(entry.failures) >= self.max_attempts:
                entry.lockout_count += 1
                duration = self.lockout_duration(entry.lockout_count)
                entry.locked_until = now + duration
                entry.failures = []
                logger.warning(
                    "login locked key=%s lockout=%s duration=%.0fs",
                    key,
                    entry.lockout_count,
                    duration,
                )

            return self._stamp_expiry(entry, now)

        return self.store.mutate(key, _apply, now)

    def reset(self, key: str) -> None:
        key = normalize_key(key)
        self.store.delete(key)
        logger.info("login rate limit reset key=%s", key)

    def get_remaining_wait(self, key: str) -> float:
        decision = self.can_attempt(key)
        if decision.allowed:
            return 0.0
        return float(decision.wait_seconds or 0.0)

    def get_remaining_attempts(self, key: str) -> int:
        key = normalize_key(key)
        now = self._clock()
        entry = self.store.get(key, now)
        if entry is None:
            return self.max_attempts
        if entry.is_locked(now):
            return 0
        window_start = now - self.window_seconds
        in_window = sum(1 for t in entry.failures if t > window_start)
        return max(0, self.max_attempts - in_window)

"""
Login attempt throttling.

RateLimiter holds the policy; the store holds the state. The default
MemoryRateLimitStore is process-local (see its docstring for the
scaling limitation); RedisRateLimitStore keeps the same contract across
instances.
"""

from libs.ratelimit.entry import RateLimitEntry
from libs.ratelimit.limiter import (
    ANONYMOUS_KEY,
    RateLimitDecision,
    RateLimiter,
    normalize_key,
)
from libs.ratelimit.stores import MemoryRateLimitStore, RedisRateLimitStore

__all__ = [
    "ANONYMOUS_KEY",
    "MemoryRateLimitStore",
    "RateLimitDecision",
    "RateLimitEntry",
    "RateLimiter",
    "RedisRateLimitStore",
    "normalize_key",
]

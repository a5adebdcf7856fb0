"""
Rate limit state for one identifier.

Shared by every store so that the memory and Redis backends apply the
exact same window / lockout arithmetic.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RateLimitEntry:
    key: str
    failures: List[float] = field(default_factory=list)
    locked_until: Optional[float] = None
    lockout_count: int = 0
    last_failure_at: Optional[float] = None
    # the store may forget the entry after this instant
    expires_at: float = 0.0

    def is_locked(self, now: float) -> bool:
        return self.locked_until is not None and self.locked_until > now

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    def to_json(self) -> str:
        return json.dumps(
            {
                "key": self.key,
                "failures": self.failures,
                "locked_until": self.locked_until,
                "lockout_count": self.lockout_count,
                "last_failure_at": self.last_failure_at,
                "expires_at": self.expires_at,
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "RateLimitEntry":
        data = json.loads(raw)
        return cls(
            key=data["key"],
            failures=[float(t) for t in data.get("failures") or []],
            locked_until=data.get("locked_until"),
            lockout_count=int(data.get("lockout_count") or 0),
            last_failure_at=data.get("last_failure_at"),
            expires_at=float(data.get("expires_at") or 0.0),
        )

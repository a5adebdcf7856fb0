# apps/api/common/auth_jwt.py
# JWT login guarded by the login rate limiter (per normalized username).
from __future__ import annotations

import logging

from rest_framework.exceptions import AuthenticationFailed, ErrorDetail, Throttled
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.core.services.login_throttle import get_login_rate_limiter
from libs.ratelimit import normalize_key

logger = logging.getLogger(__name__)


class LoginThrottled(Throttled):
    """429 with {"detail": ..., "waitSeconds": n} and a Retry-After header."""

    default_code = "login_throttled"

    def __init__(self, wait, message):
        super().__init__(wait=wait, detail=message)
        self.detail = {
            "detail": ErrorDetail(message, code=self.default_code),
            "waitSeconds": self.wait,
        }


def login_identifier(request) -> str:
    data = getattr(request, "data", None) or {}
    raw = data.get("username") if hasattr(data, "get") else None
    return normalize_key(raw if isinstance(raw, str) else None)


class RateLimitedTokenObtainPairView(TokenObtainPairView):
    """
    simplejwt pair login.

    - locked identifier: 429 before credentials are checked
    - bad credentials: recorded as a failure, then the usual 401
    - success: clears the identifier's failure history
    """

    def post(self, request, *args, **kwargs):
        limiter = get_login_rate_limiter()
        key = login_identifier(request)

        decision = limiter.can_attempt(key)
        if not decision.allowed:
            raise LoginThrottled(decision.wait_seconds, decision.message)

        try:
            response = super().post(request, *args, **kwargs)
        except AuthenticationFailed:
            entry = limiter.record_attempt(key, success=False)
            logger.info(
                "login failed identifier=%s failures=%s",
                key,
                len(entry.failures) if entry is not None else 0,
            )
            raise

        limiter.record_attempt(key, success=True)
        return response

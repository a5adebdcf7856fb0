# apps/api/common/middleware.py
# Unhandled view exceptions become a generic 500 JSON body.
# Responses built in process_exception skip CorsMiddleware, so CORS headers are added here.
from __future__ import annotations

import logging

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error."


def _add_cors_headers_to_response(request, response):
    """
    Lets the browser read the 500 body (no missing Access-Control-Allow-Origin).
    """
    origin = (request.META.get("HTTP_ORIGIN") or "").strip()
    allowed = getattr(settings, "CORS_ALLOWED_ORIGINS", []) or []
    if origin and origin in allowed:
        response["Access-Control-Allow-Origin"] = origin
    elif allowed:
        response["Access-Control-Allow-Origin"] = allowed[0]
    if getattr(settings, "CORS_ALLOW_CREDENTIALS", False):
        response["Access-Control-Allow-Credentials"] = "true"
    return response


class UnhandledExceptionMiddleware:
    """
    Unhandled exception -> 500 JSON. The traceback goes to the log only;
    the client never sees exception text.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        logger.exception(
            "Unhandled exception method=%s path=%s", request.method, request.path
        )
        resp = JsonResponse({"detail": INTERNAL_ERROR_DETAIL}, status=500)
        return _add_cors_headers_to_response(request, resp)

"""
Shared API views.
"""
import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

from libs.redis import is_redis_available

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint.

    Returns:
        - 200: database reachable (redis reported, optional)
        - 503: database unreachable
    """
    redis_state = "connected" if is_redis_available() else "unavailable"
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        logger.exception("health check: database unreachable")
        return JsonResponse({
            "status": "unhealthy",
            "service": "watch-api",
            "database": "disconnected",
            "redis": redis_state,
        }, status=503)

    return JsonResponse({
        "status": "healthy",
        "service": "watch-api",
        "database": "connected",
        "redis": redis_state,
    }, status=200)

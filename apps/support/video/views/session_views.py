# PATH: apps/support/video/views/session_views.py

import ipaddress

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import WatchSession
from ..serializers import (
    SessionProgressSerializer,
    StartSessionSerializer,
    WatchSessionSerializer,
)
from ..services.watch_session import (
    cleanup_sessions,
    end_session,
    start_session,
    update_session,
)


def client_ip(request):
    """
    REMOTE_ADDR, or the first X-Forwarded-For hop when the deployment sits
    behind a trusted proxy (VIDEO_TRUST_X_FORWARDED_FOR).
    Unparseable values are dropped.
    """
    raw = request.META.get("REMOTE_ADDR")
    if getattr(settings, "VIDEO_TRUST_X_FORWARDED_FOR", False):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        if forwarded:
            raw = forwarded.split(",")[0].strip()
    if not raw:
        return None
    try:
        return str(ipaddress.ip_address(raw))
    except ValueError:
        return None


class WatchSessionStartView(APIView):
    """POST /video/sessions/start/"""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = StartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        viewer_id = data.get("viewerId")
        if viewer_id is not None and viewer_id != request.user.pk:
            raise PermissionDenied("viewerId does not match the authenticated user.")

        result = start_session(
            request.user.pk,
            data["contentId"],
            ip_address=client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        body = {"sessionId": result.session_id}
        if result.warning:
            body["warning"] = result.warning
        return Response(body, status=status.HTTP_201_CREATED)


class WatchSessionUpdateView(APIView):
    """POST /video/sessions/update/"""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = SessionProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        update_session(data["sessionId"], request.user.pk, data["watchedSeconds"])
        return Response({"success": True})


class WatchSessionEndView(APIView):
    """POST /video/sessions/end/"""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = SessionProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        session = end_session(data["sessionId"], request.user.pk, data["watchedSeconds"])
        return Response(WatchSessionSerializer(session).data)


class WatchSessionCleanupView(APIView):
    """POST /video/sessions/cleanup/ : close every active session of the caller."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        closed = cleanup_sessions(request.user.pk)
        return Response({"success": True, "closed": closed})


class MyWatchSessionListView(ListAPIView):
    """GET /video/sessions/?content=&is_active= : the caller's own history, newest first."""

    serializer_class = WatchSessionSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["content", "is_active"]

    def get_queryset(self):
        return WatchSession.objects.filter(viewer_id=self.request.user.pk).order_by("-started_at")

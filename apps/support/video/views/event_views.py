# PATH: apps/support/video/views/event_views.py

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..serializers import RecordEventSerializer
from ..services.event_recorder import record_event


class VideoEventView(APIView):
    """POST /video/events/"""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = RecordEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record_event(
            data["sessionId"],
            request.user.pk,
            data["eventType"],
            data["videoTimestampSeconds"],
            metadata=data.get("metadata") or {},
        )
        return Response({"success": True})

# PATH: apps/support/video/views/analytics_views.py

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsTeacher

from ..serializers import TeacherAnalyticsQuerySerializer
from ..services.analytics import summarize_for_teacher


class TeacherAnalyticsView(APIView):
    """
    GET /video/analytics/teacher/?courseId=&contentId=&viewerId=

    Sessions of the caller's assigned courses plus stats,
    per-student drilldown and per-content aggregates.
    """

    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        serializer = TeacherAnalyticsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        summary = summarize_for_teacher(
            request.user.pk,
            course_id=params.get("courseId"),
            content_id=params.get("contentId"),
            viewer_id=params.get("viewerId"),
        )
        return Response(summary)

# PATH: apps/support/video/serializers.py

from rest_framework import serializers

from .models import VideoEvent, WatchSession

# ========================================================
# Session lifecycle (request bodies, camelCase)
# ========================================================


class StartSessionSerializer(serializers.Serializer):
    contentId = serializers.IntegerField(min_value=1)
    # optional; must match the authenticated user
    viewerId = serializers.IntegerField(required=False, min_value=1)


class SessionProgressSerializer(serializers.Serializer):
    """update / end"""

    # malformed ids are mapped to 404 by the service, not 400 here
    sessionId = serializers.CharField(max_length=64)
    watchedSeconds = serializers.FloatField(min_value=0)


class RecordEventSerializer(serializers.Serializer):
    sessionId = serializers.CharField(max_length=64)
    eventType = serializers.ChoiceField(choices=VideoEvent.EventType.values)
    videoTimestampSeconds = serializers.FloatField(min_value=0)
    metadata = serializers.DictField(default=dict)


# ========================================================
# Analytics
# ========================================================


class TeacherAnalyticsQuerySerializer(serializers.Serializer):
    courseId = serializers.IntegerField(required=False, min_value=1)
    contentId = serializers.IntegerField(required=False, min_value=1)
    viewerId = serializers.IntegerField(required=False, min_value=1)


class WatchSessionSerializer(serializers.ModelSerializer):
    """Read-only view of a session (end response, admin tooling)."""

    sessionId = serializers.CharField(source="id", read_only=True)
    viewerId = serializers.IntegerField(source="viewer_id", read_only=True)
    contentId = serializers.IntegerField(source="content_id", read_only=True)
    watchedSeconds = serializers.FloatField(source="watched_seconds", read_only=True)
    completionPercent = serializers.FloatField(source="completion_percent", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    startedAt = serializers.DateTimeField(source="started_at", read_only=True)
    endedAt = serializers.DateTimeField(source="ended_at", read_only=True)

    class Meta:
        model = WatchSession
        fields = [
            "sessionId",
            "viewerId",
            "contentId",
            "watchedSeconds",
            "completionPercent",
            "isActive",
            "startedAt",
            "endedAt",
        ]

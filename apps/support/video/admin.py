from django.contrib import admin
from .models import (
    VideoEvent,
    WatchSession,
)


class VideoEventInline(admin.TabularInline):
    model = VideoEvent
    extra = 0
    fields = ("recorded_at", "event_type", "video_timestamp_seconds", "metadata")
    readonly_fields = fields
    ordering = ("recorded_at", "id")
    can_delete = False


@admin.register(WatchSession)
class WatchSessionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "viewer",
        "content",
        "is_active",
        "watched_seconds",
        "completion_percent",
        "started_at",
        "ended_at",
        "is_suspicious",
    )
    list_display_links = ("id",)
    list_filter = ("is_active", "content__course")
    search_fields = ("viewer__username", "viewer__name", "content__title", "ip_address")
    ordering = ("-started_at",)
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = [VideoEventInline]

    @admin.display(boolean=True, description="Suspicious")
    def is_suspicious(self, obj):
        return obj.is_suspicious


@admin.register(VideoEvent)
class VideoEventAdmin(admin.ModelAdmin):
    list_display = ("id", "session", "event_type", "video_timestamp_seconds", "recorded_at")
    list_display_links = ("id", "session")
    list_filter = ("event_type",)
    search_fields = ("session__id",)
    ordering = ("-recorded_at",)

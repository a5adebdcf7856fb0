import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.models.base import TimestampModel
from apps.domains.courses.models import Content


def compute_completion_percent(watched_seconds, duration_seconds) -> float:
    """
    min(100, watched / duration * 100), clamped to [0, 100].
    Unknown or zero duration -> 0.
    """
    if not duration_seconds or duration_seconds <= 0:
        return 0.0
    pct = float(watched_seconds or 0) / float(duration_seconds) * 100.0
    return max(0.0, min(100.0, pct))


# ========================================================
# Watch Session (one row per viewing attempt)
# ========================================================

class WatchSession(TimestampModel):
    """
    Lifecycle: start -> (update)* -> end | terminal event | cleanup.

    Never deleted; closed rows feed teacher analytics and audit.
    At most one is_active row per (viewer, content), enforced by the
    partial unique constraint below.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    viewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="watch_sessions",
    )
    content = models.ForeignKey(
        Content,
        on_delete=models.CASCADE,
        related_name="watch_sessions",
    )

    started_at = models.DateTimeField(default=timezone.now, db_index=True)
    ended_at = models.DateTimeField(null=True, blank=True)
    last_seen_at = models.DateTimeField(null=True, blank=True, help_text="Last heartbeat time")

    is_active = models.BooleanField(default=True, db_index=True)

    watched_seconds = models.FloatField(default=0)
    completion_percent = models.FloatField(default=0)

    # content duration at start time (null = unknown)
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=512, blank=True, default="")

    # suspicion flags: {"suspicious": true, "flags": [...], "flagged_at": "..."}
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["viewer", "content"],
                condition=Q(is_active=True),
                name="uniq_active_watch_session",
            ),
            models.CheckConstraint(
                condition=Q(watched_seconds__gte=0),
                name="watch_session_watched_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["viewer", "is_active"], name="watch_session_viewer_act_idx"),
            models.Index(fields=["content", "started_at"], name="watch_session_content_idx"),
        ]
        ordering = ["-started_at"]

    def __str__(self):
        state = "ACTIVE" if self.is_active else "CLOSED"
        return f"{self.viewer_id}/{self.content_id} {self.id} {state}"

    @property
    def is_suspicious(self) -> bool:
        return bool((self.metadata or {}).get("suspicious"))

    def apply_watched_seconds(self, watched_seconds: float) -> None:
        self.watched_seconds = float(watched_seconds)
        self.completion_percent = compute_completion_percent(
            self.watched_seconds, self.duration_seconds
        )


# ========================================================
# Video Event (append-only playback log)
# ========================================================

class VideoEvent(models.Model):
    class EventType(models.TextChoices):
        PLAY = "play", "Play"
        PAUSE = "pause", "Pause"
        SEEK = "seek", "Seek"
        HEARTBEAT = "heartbeat", "Heartbeat"
        RATE_CHANGE = "ratechange", "Playback rate change"
        VISIBILITY_HIDDEN = "visibility_hidden", "Tab hidden"
        VISIBILITY_VISIBLE = "visibility_visible", "Tab visible"
        ERROR = "error", "Player error"
        CLOSE = "close", "Close"
        ENDED = "ended", "Ended"

    TERMINAL_TYPES = frozenset({EventType.CLOSE, EventType.ENDED})

    session = models.ForeignKey(
        WatchSession,
        on_delete=models.CASCADE,
        related_name="events",
    )

    event_type = models.CharField(
        max_length=32,
        choices=EventType.choices,
        db_index=True,
    )

    video_timestamp_seconds = models.FloatField(default=0)
    metadata = models.JSONField(default=dict, blank=True)

    recorded_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        indexes = [
            models.Index(fields=["session", "recorded_at"], name="video_event_session_idx"),
        ]
        ordering = ["recorded_at", "id"]

    def __str__(self):
        return f"{self.session_id} {self.event_type}@{self.video_timestamp_seconds}"

    @property
    def is_terminal(self) -> bool:
        return self.event_type in self.TERMINAL_TYPES

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("courses", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="WatchSession",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("started_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                ("last_seen_at", models.DateTimeField(blank=True, help_text="Last heartbeat time", null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("watched_seconds", models.FloatField(default=0)),
                ("completion_percent", models.FloatField(default=0)),
                ("duration_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, default="", max_length=512)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "content",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="watch_sessions",
                        to="courses.content",
                    ),
                ),
                (
                    "viewer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="watch_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-started_at"],
                "indexes": [
                    models.Index(fields=["viewer", "is_active"], name="watch_session_viewer_act_idx"),
                    models.Index(fields=["content", "started_at"], name="watch_session_content_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("viewer", "content"),
                        name="uniq_active_watch_session",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("watched_seconds__gte", 0)),
                        name="watch_session_watched_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VideoEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("play", "Play"),
                            ("pause", "Pause"),
                            ("seek", "Seek"),
                            ("heartbeat", "Heartbeat"),
                            ("ratechange", "Playback rate change"),
                            ("visibility_hidden", "Tab hidden"),
                            ("visibility_visible", "Tab visible"),
                            ("error", "Player error"),
                            ("close", "Close"),
                            ("ended", "Ended"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("video_timestamp_seconds", models.FloatField(default=0)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("recorded_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="video.watchsession",
                    ),
                ),
            ],
            options={
                "ordering": ["recorded_at", "id"],
                "indexes": [
                    models.Index(fields=["session", "recorded_at"], name="video_event_session_idx"),
                ],
            },
        ),
    ]

# PATH: apps/support/video/services/event_recorder.py

"""
Append-only playback event log.

Events are stored even when the session is already closed (audit trail).
A terminal event (close / ended) closes the session with the same
conditional UPDATE that end/cleanup use, so racing closers converge.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.support.video.models import VideoEvent, WatchSession, compute_completion_percent

from ..exceptions import WatchSessionNotFound
from .suspicion import event_flags, flag_session
from .watch_session import parse_session_id

logger = logging.getLogger(__name__)

_EVENT_TYPES = frozenset(VideoEvent.EventType.values)

# server-owned keys; client copies are dropped
RESERVED_METADATA_KEYS = frozenset({"suspicious_flags"})


def _clean_event_type(value) -> str:
    event_type = str(value or "").strip().lower()
    if event_type not in _EVENT_TYPES:
        raise ValidationError({"eventType": f"Unknown event type: {value!r}."})
    return event_type


def _clean_timestamp(value) -> float:
    if isinstance(value, bool):
        raise ValidationError({"videoTimestampSeconds": "Must be a number."})
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError({"videoTimestampSeconds": "Must be a number."})
    if not math.isfinite(seconds) or seconds < 0:
        raise ValidationError({"videoTimestampSeconds": "Must be a finite number >= 0."})
    return seconds


def _close_on_terminal(session: WatchSession, watched_seconds: float, now) -> bool:
    """Conditional close. False when another path already closed the row."""
    closed = WatchSession.objects.filter(pk=session.pk, is_active=True).update(
        is_active=False,
        ended_at=now,
        last_seen_at=now,
        watched_seconds=watched_seconds,
        completion_percent=compute_completion_percent(watched_seconds, session.duration_seconds),
        updated_at=now,
    )
    return bool(closed)


def record_event(
    session_id,
    viewer_id,
    event_type,
    video_timestamp_seconds,
    metadata: Optional[dict] = None,
) -> VideoEvent:
    event_type = _clean_event_type(event_type)
    timestamp = _clean_timestamp(video_timestamp_seconds)
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError({"metadata": "Must be an object."})

    with transaction.atomic():
        session = (
            WatchSession.objects
            .select_for_update()
            .filter(pk=parse_session_id(session_id), viewer_id=viewer_id)
            .first()
        )
        if session is None:
            raise WatchSessionNotFound()

        now = timezone.now()
        flags = event_flags(
            session=session,
            event_type=event_type,
            video_timestamp_seconds=timestamp,
            now=now,
        )

        event_metadata = {
            key: value
            for key, value in (metadata or {}).items()
            if key not in RESERVED_METADATA_KEYS
        }
        if flags:
            event_metadata["suspicious_flags"] = flags

        event = VideoEvent.objects.create(
            session=session,
            event_type=event_type,
            video_timestamp_seconds=timestamp,
            metadata=event_metadata,
            recorded_at=now,
        )

        flag_session(session, flags, now=now)

        closed = False
        if event.is_terminal:
            closed = _close_on_terminal(session, timestamp, now)

    if closed:
        logger.info(
            "watch session closed by event session=%s type=%s watched=%.1f",
            session.pk,
            event_type,
            timestamp,
        )
    return event

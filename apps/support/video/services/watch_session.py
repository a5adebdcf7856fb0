# PATH: apps/support/video/services/watch_session.py

"""
Watch session lifecycle (DB is the source of truth).

start -> (update)* -> end | terminal event | cleanup | stale sweep

- start serializes per viewer on the viewer row lock, closes any prior
  active session for the same content, then inserts the new row.
- every close is a conditional UPDATE on is_active=True, so the paths
  above converge: whichever runs first closes the row, the others are no-ops.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.support.video.models import WatchSession

from ..exceptions import ViewerNotFound, WatchSessionConflict, WatchSessionNotFound
from .access_grant import check_content_access
from .suspicion import location_flags, merge_flags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartResult:
    session_id: str
    warning: Optional[str] = None


def _clean_watched_seconds(value) -> float:
    if isinstance(value, bool):
        raise ValidationError({"watchedSeconds": "Must be a number."})
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError({"watchedSeconds": "Must be a number."})
    if not math.isfinite(seconds):
        raise ValidationError({"watchedSeconds": "Must be a finite number."})
    if seconds < 0:
        raise ValidationError({"watchedSeconds": "Must be >= 0."})
    return seconds


def parse_session_id(session_id) -> uuid.UUID:
    """Malformed ids are indistinguishable from unknown ones."""
    if isinstance(session_id, uuid.UUID):
        return session_id
    try:
        return uuid.UUID(str(session_id))
    except (TypeError, ValueError):
        raise WatchSessionNotFound()


def _locked_active_session(session_id, viewer_id) -> WatchSession:
    """Caller must be inside transaction.atomic()."""
    session = (
        WatchSession.objects
        .select_for_update()
        .filter(pk=parse_session_id(session_id), viewer_id=viewer_id, is_active=True)
        .first()
    )
    if session is None:
        raise WatchSessionNotFound()
    return session


# =======================================================
# start
# =======================================================

def start_session(
    viewer_id,
    content_id,
    *,
    ip_address: Optional[str] = None,
    user_agent: str = "",
) -> StartResult:
    content = check_content_access(viewer_id=viewer_id, content_id=content_id)
    now = timezone.now()
    user_agent = (user_agent or "")[:512]

    try:
        with transaction.atomic():
            # per-viewer serialization point for concurrent starts
            locked = (
                get_user_model().objects
                .select_for_update()
                .filter(pk=viewer_id)
                .values_list("pk", flat=True)
                .first()
            )
            if locked is None:
                raise ViewerNotFound()

            closed = WatchSession.objects.filter(
                viewer_id=viewer_id,
                content_id=content.pk,
                is_active=True,
            ).update(is_active=False, ended_at=now, updated_at=now)

            flags, warning = location_flags(
                viewer_id=viewer_id,
                ip_address=ip_address,
                user_agent=user_agent,
                now=now,
            )

            session = WatchSession.objects.create(
                viewer_id=viewer_id,
                content=content,
                started_at=now,
                last_seen_at=now,
                is_active=True,
                duration_seconds=content.duration_seconds,
                ip_address=ip_address or None,
                user_agent=user_agent,
                metadata=merge_flags({}, flags, now=now),
            )
    except IntegrityError:
        logger.exception(
            "watch session start conflict viewer=%s content=%s", viewer_id, content_id
        )
        raise WatchSessionConflict()

    if flags:
        logger.warning(
            "watch session flagged session=%s viewer=%s flags=%s",
            session.pk,
            viewer_id,
            ",".join(flags),
        )
    logger.info(
        "watch session started session=%s viewer=%s content=%s closed_prior=%s",
        session.pk,
        viewer_id,
        content.pk,
        closed,
    )
    return StartResult(session_id=str(session.pk), warning=warning)


# =======================================================
# update / end
# =======================================================

def update_session(session_id, viewer_id, watched_seconds) -> WatchSession:
    seconds = _clean_watched_seconds(watched_seconds)

    with transaction.atomic():
        session = _locked_active_session(session_id, viewer_id)
        session.apply_watched_seconds(seconds)
        session.last_seen_at = timezone.now()
        session.save(
            update_fields=[
                "watched_seconds",
                "completion_percent",
                "last_seen_at",
                "updated_at",
            ]
        )

    logger.debug(
        "watch session updated session=%s watched=%.1f", session.pk, session.watched_seconds
    )
    return session


def end_session(session_id, viewer_id, watched_seconds) -> WatchSession:
    seconds = _clean_watched_seconds(watched_seconds)

    with transaction.atomic():
        session = _locked_active_session(session_id, viewer_id)
        now = timezone.now()
        session.apply_watched_seconds(seconds)
        session.is_active = False
        session.ended_at = now
        session.last_seen_at = now
        session.save(
            update_fields=[
                "watched_seconds",
                "completion_percent",
                "is_active",
                "ended_at",
                "last_seen_at",
                "updated_at",
            ]
        )

    logger.info(
        "watch session ended session=%s viewer=%s watched=%.1f completion=%.1f",
        session.pk,
        viewer_id,
        session.watched_seconds,
        session.completion_percent,
    )
    return session


# =======================================================
# bulk close
# =======================================================

def cleanup_sessions(viewer_id) -> int:
    """Close every active session of the viewer. Idempotent."""
    now = timezone.now()
    closed = WatchSession.objects.filter(
        viewer_id=viewer_id,
        is_active=True,
    ).update(is_active=False, ended_at=now, updated_at=now)

    if closed:
        logger.info("watch sessions cleaned up viewer=%s closed=%s", viewer_id, closed)
    return closed


def close_stale_sessions(older_than: datetime) -> int:
    """
    Close active sessions with no activity since `older_than`
    (last_seen_at, falling back to started_at).
    """
    now = timezone.now()
    stale = Q(last_seen_at__lt=older_than) | Q(last_seen_at__isnull=True, started_at__lt=older_than)
    closed = WatchSession.objects.filter(stale, is_active=True).update(
        is_active=False, ended_at=now, updated_at=now
    )

    if closed:
        logger.info("stale watch sessions closed count=%s cutoff=%s", closed, older_than.isoformat())
    return closed

# PATH: apps/support/video/services/suspicion.py

"""
Suspicious viewing heuristics.

Flags never block playback. They are stamped on the event metadata and
merged into WatchSession.metadata, where teacher analytics counts them.

Thresholds: settings.VIDEO_SUSPICION (see DEFAULTS).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from django.conf import settings

from apps.support.video.models import VideoEvent, WatchSession

logger = logging.getLogger(__name__)

CONCURRENT_SESSIONS = "concurrent_sessions"
MULTIPLE_LOCATIONS = "multiple_locations"
TIMESTAMP_JUMP = "timestamp_jump"

DEFAULTS = {
    "MAX_CONCURRENT_SESSIONS": 3,
    "LOCATION_WINDOW_HOURS": 24,
    "MAX_DISTINCT_IPS": 5,
    "MAX_DISTINCT_DEVICES": 3,
    "MAX_PLAYBACK_RATE": 2.0,
    "JUMP_GRACE_SECONDS": 10,
}


def _conf() -> dict:
    conf = dict(DEFAULTS)
    conf.update(getattr(settings, "VIDEO_SUSPICION", {}) or {})
    return conf


# --------------------------------------------------
# flag persistence
# --------------------------------------------------

def merge_flags(metadata: Optional[dict], flags: List[str], *, now: datetime) -> dict:
    """Returns a new metadata dict carrying the union of old and new flags."""
    merged = dict(metadata or {})
    if not flags:
        return merged
    existing = set(merged.get("flags") or [])
    merged["flags"] = sorted(existing | set(flags))
    merged["suspicious"] = True
    merged["flagged_at"] = now.isoformat()
    return merged


def flag_session(session: WatchSession, flags: List[str], *, now: datetime) -> bool:
    """Persist flags on the session row. Caller holds the row lock."""
    if not flags:
        return False
    before = set((session.metadata or {}).get("flags") or [])
    session.metadata = merge_flags(session.metadata, flags, now=now)
    session.save(update_fields=["metadata", "updated_at"])

    added = set(flags) - before
    if added:
        logger.warning(
            "watch session flagged session=%s viewer=%s flags=%s",
            session.pk,
            session.viewer_id,
            ",".join(sorted(added)),
        )
    return bool(added)


# --------------------------------------------------
# heuristics
# --------------------------------------------------

def location_flags(
    *,
    viewer_id,
    ip_address: Optional[str],
    user_agent: str,
    now: datetime,
) -> Tuple[List[str], Optional[str]]:
    """
    Runs when a session starts: too many distinct IPs or user agents for
    this viewer in the trailing window. Returns (flags, warning for the
    client).
    """
    conf = _conf()
    flags: List[str] = []
    warning = None

    since = now - timedelta(hours=float(conf["LOCATION_WINDOW_HOURS"]))
    recent = WatchSession.objects.filter(viewer_id=viewer_id, started_at__gte=since)

    ips = set(
        recent.exclude(ip_address__isnull=True).values_list("ip_address", flat=True).distinct()
    )
    if ip_address:
        ips.add(ip_address)

    devices = set(
        recent.exclude(user_agent="").values_list("user_agent", flat=True).distinct()
    )
    if user_agent:
        devices.add(user_agent)

    if len(ips) > int(conf["MAX_DISTINCT_IPS"]) or len(devices) > int(conf["MAX_DISTINCT_DEVICES"]):
        flags.append(MULTIPLE_LOCATIONS)
        warning = (
            f"Access detected from multiple locations ({len(ips)} IPs, "
            f"{len(devices)} devices). This activity will be monitored."
        )

    return flags, warning


def event_flags(
    *,
    session: WatchSession,
    event_type: str,
    video_timestamp_seconds: float,
    now: datetime,
) -> List[str]:
    """
    Checks run for every recorded event (before it is stored):

    - concurrent_sessions: the viewer holds too many active sessions
      (across all contents) at once
    - timestamp_jump: a non-seek event whose video clock moved further
      than the wall clock allows (at the maximum playback rate) since
      the previous event (the session's last known position for the
      first event)
    """
    conf = _conf()
    flags: List[str] = []

    active = WatchSession.objects.filter(viewer_id=session.viewer_id, is_active=True).count()
    if active >= int(conf["MAX_CONCURRENT_SESSIONS"]):
        flags.append(CONCURRENT_SESSIONS)

    if event_type == VideoEvent.EventType.SEEK:
        return flags

    previous = (
        VideoEvent.objects
        .filter(session=session)
        .order_by("-recorded_at", "-id")
        .only("video_timestamp_seconds", "recorded_at")
        .first()
    )
    if previous is not None:
        baseline_position = previous.video_timestamp_seconds
        baseline_at = previous.recorded_at
    else:
        # first event: measure from the session's own last known position
        baseline_position = session.watched_seconds or 0.0
        baseline_at = session.last_seen_at or session.started_at

    elapsed = max(0.0, (now - baseline_at).total_seconds())
    allowed = elapsed * float(conf["MAX_PLAYBACK_RATE"]) + float(conf["JUMP_GRACE_SECONDS"])
    advanced = float(video_timestamp_seconds) - float(baseline_position)

    if advanced > allowed:
        flags.append(TIMESTAMP_JUMP)
    return flags


def flag_counts(metadata_rows) -> dict:
    """{flag: sessions carrying it} over an already-filtered session list."""
    counts: dict = {}
    for metadata in metadata_rows:
        for flag in (metadata or {}).get("flags") or []:
            counts[flag] = counts.get(flag, 0) + 1
    return counts

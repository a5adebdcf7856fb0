# PATH: apps/support/video/services/analytics.py

"""
Teacher-facing watch analytics.

Scope is the teacher's assigned courses (optionally narrowed to one course,
content or viewer), newest sessions first, capped at
VIDEO_ANALYTICS_PAGE_SIZE. All aggregates are computed over that returned
page.

studentStats carries the per-student drilldown: one row per viewer with a
per-content breakdown and a course progress summary. A content counts as
completed once the viewer's accumulated watch time reaches
COMPLETED_CONTENT_PERCENT of its duration.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.db.models import Count, Max

from apps.support.video.models import WatchSession

from ..exceptions import CourseNotAssigned, TeacherRoleRequired
from .access_grant import load_access_grant
from .suspicion import flag_counts

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
COMPLETED_CONTENT_PERCENT = 80.0


def _page_size() -> int:
    return int(getattr(settings, "VIDEO_ANALYTICS_PAGE_SIZE", DEFAULT_PAGE_SIZE))


def empty_stats() -> dict:
    return {
        "totalSessions": 0,
        "activeSessions": 0,
        "totalWatchTime": 0.0,
        "averageCompletion": 0.0,
        "uniqueUsers": 0,
        "suspiciousSessions": 0,
        "flagCounts": {},
    }


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _last_activity(s: WatchSession):
    return s.ended_at or s.last_seen_at or s.started_at


def _session_row(s: WatchSession) -> dict:
    meta = s.metadata or {}
    return {
        "id": str(s.pk),
        "viewerId": s.viewer_id,
        "viewerName": s.viewer.name or s.viewer.username,
        "contentId": s.content_id,
        "contentTitle": s.content.title,
        "courseId": s.content.course_id,
        "startedAt": _iso(s.started_at),
        "endedAt": _iso(s.ended_at),
        "lastSeenAt": _iso(s.last_seen_at),
        "isActive": s.is_active,
        "watchedSeconds": s.watched_seconds,
        "completionPercent": round(s.completion_percent, 2),
        "eventCount": s.event_count,
        "lastEventAt": _iso(s.last_event_at),
        "suspicious": bool(meta.get("suspicious")),
        "flags": list(meta.get("flags") or []),
    }


def _stats(sessions: List[WatchSession]) -> dict:
    if not sessions:
        return empty_stats()

    total = len(sessions)
    return {
        "totalSessions": total,
        "activeSessions": sum(1 for s in sessions if s.is_active),
        "totalWatchTime": sum(s.watched_seconds for s in sessions),
        "averageCompletion": round(sum(s.completion_percent for s in sessions) / total, 2),
        "uniqueUsers": len({s.viewer_id for s in sessions}),
        "suspiciousSessions": sum(1 for s in sessions if s.is_suspicious),
        "flagCounts": flag_counts(s.metadata for s in sessions),
    }


def _content_progress(total_watch_time: float, duration_seconds) -> float:
    if not duration_seconds:
        return 0.0
    return min(100.0, total_watch_time / float(duration_seconds) * 100.0)


def _student_contents(sessions: List[WatchSession]) -> List[dict]:
    """Per-content breakdown of one viewer's sessions."""
    by_content: Dict[int, dict] = {}
    for s in sessions:
        row = by_content.get(s.content_id)
        if row is None:
            row = by_content[s.content_id] = {
                "contentId": s.content_id,
                "contentTitle": s.content.title,
                "courseId": s.content.course_id,
                "durationSeconds": s.duration_seconds or s.content.duration_seconds or 0,
                "totalWatchTime": 0.0,
                "sessionCount": 0,
                "eventCount": 0,
                "firstSession": s.started_at,
                "lastSession": _last_activity(s),
            }
        row["totalWatchTime"] += s.watched_seconds
        row["sessionCount"] += 1
        row["eventCount"] += s.event_count
        row["firstSession"] = min(row["firstSession"], s.started_at)
        row["lastSession"] = max(row["lastSession"], _last_activity(s))

    result = []
    for row in by_content.values():
        progress = _content_progress(row["totalWatchTime"], row["durationSeconds"])
        row["progressPercent"] = round(progress, 2)
        row["completed"] = progress >= COMPLETED_CONTENT_PERCENT
        row["firstSession"] = _iso(row["firstSession"])
        row["lastSession"] = _iso(row["lastSession"])
        result.append(row)
    return result


def _student_stats(sessions: List[WatchSession]) -> List[dict]:
    by_viewer: Dict[int, dict] = {}
    sessions_by_viewer: Dict[int, List[WatchSession]] = {}
    for s in sessions:
        row = by_viewer.get(s.viewer_id)
        if row is None:
            row = by_viewer[s.viewer_id] = {
                "viewerId": s.viewer_id,
                "viewerName": s.viewer.name or s.viewer.username,
                "totalSessions": 0,
                "totalWatchTime": 0.0,
                "completedSessions": 0,
                "activeSessions": 0,
                "lastActivity": None,
            }
            sessions_by_viewer[s.viewer_id] = []
        sessions_by_viewer[s.viewer_id].append(s)

        row["totalSessions"] += 1
        row["totalWatchTime"] += s.watched_seconds
        if s.is_active:
            row["activeSessions"] += 1
        elif s.ended_at:
            row["completedSessions"] += 1
        if row["lastActivity"] is None or s.started_at > row["lastActivity"]:
            row["lastActivity"] = s.started_at

    result = []
    for viewer_id, row in by_viewer.items():
        contents = _student_contents(sessions_by_viewer[viewer_id])
        row["lastActivity"] = _iso(row["lastActivity"])
        row["uniqueContents"] = len(contents)
        row["contentsCompleted"] = sum(1 for c in contents if c["completed"])
        row["courseProgress"] = round(
            sum(c["progressPercent"] for c in contents) / len(contents), 2
        )
        row["contents"] = contents
        result.append(row)
    return result


def _class_stats(sessions: List[WatchSession]) -> List[dict]:
    by_content: Dict[int, dict] = {}
    for s in sessions:
        row = by_content.get(s.content_id)
        if row is None:
            row = by_content[s.content_id] = {
                "contentId": s.content_id,
                "contentTitle": s.content.title,
                "totalViews": 0,
                "totalWatchTime": 0.0,
                "_viewers": set(),
            }
        row["totalViews"] += 1
        row["totalWatchTime"] += s.watched_seconds
        row["_viewers"].add(s.viewer_id)

    result = []
    for row in by_content.values():
        row["uniqueViewers"] = len(row.pop("_viewers"))
        row["averageWatchTime"] = round(row["totalWatchTime"] / row["totalViews"], 2)
        result.append(row)
    return result


def summarize_for_teacher(teacher_id, *, course_id=None, content_id=None, viewer_id=None) -> dict:
    grant = load_access_grant(teacher_id)
    if grant is None or not grant.is_teacher:
        raise TeacherRoleRequired()

    assigned = grant.assigned_course_ids
    if not assigned:
        return {"sessions": [], "stats": empty_stats(), "studentStats": [], "classStats": []}

    if course_id is not None and int(course_id) not in assigned:
        raise CourseNotAssigned()

    qs = (
        WatchSession.objects
        .select_related("viewer", "content")
        .filter(content__course_id__in=assigned)
    )
    if course_id is not None:
        qs = qs.filter(content__course_id=int(course_id))
    if content_id is not None:
        qs = qs.filter(content_id=int(content_id))
    if viewer_id is not None:
        qs = qs.filter(viewer_id=int(viewer_id))

    qs = qs.annotate(
        event_count=Count("events"),
        last_event_at=Max("events__recorded_at"),
    )
    sessions = list(qs.order_by("-started_at", "-created_at")[: _page_size()])

    logger.debug(
        "teacher analytics teacher=%s course=%s content=%s viewer=%s rows=%s",
        teacher_id,
        course_id,
        content_id,
        viewer_id,
        len(sessions),
    )

    return {
        "sessions": [_session_row(s) for s in sessions],
        "stats": _stats(sessions),
        "studentStats": _student_stats(sessions),
        "classStats": _class_stats(sessions),
    }

# PATH: apps/support/video/views/__init__.py

from .session_views import (
    WatchSessionStartView,
    WatchSessionUpdateView,
    WatchSessionEndView,
    WatchSessionCleanupView,
    MyWatchSessionListView,
)
from .event_views import VideoEventView
from .analytics_views import TeacherAnalyticsView

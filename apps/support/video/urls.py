# PATH: apps/support/video/urls.py

from django.urls import path

from .views import (
    WatchSessionStartView,
    WatchSessionUpdateView,
    WatchSessionEndView,
    WatchSessionCleanupView,
    MyWatchSessionListView,
    VideoEventView,
    TeacherAnalyticsView,
)

# ========================================================
# Watch sessions (viewer)
# ========================================================

urlpatterns = [
    path("sessions/", MyWatchSessionListView.as_view(), name="video-session-list"),
    path("sessions/start/", WatchSessionStartView.as_view(), name="video-session-start"),
    path("sessions/update/", WatchSessionUpdateView.as_view(), name="video-session-update"),
    path("sessions/end/", WatchSessionEndView.as_view(), name="video-session-end"),
    path("sessions/cleanup/", WatchSessionCleanupView.as_view(), name="video-session-cleanup"),
    path("events/", VideoEventView.as_view(), name="video-event"),
]

# ========================================================
# Analytics (teacher)
# ========================================================

urlpatterns += [
    path("analytics/teacher/", TeacherAnalyticsView.as_view(), name="video-analytics-teacher"),
]

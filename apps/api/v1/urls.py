# apps/api/v1/urls.py
from django.urls import path, include

urlpatterns = [
    # =========================
    # Core
    # =========================
    path("core/", include("apps.core.urls")),

    # =========================
    # Video watch sessions / analytics
    # =========================
    path("video/", include("apps.support.video.urls")),
]

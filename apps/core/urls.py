# apps/core/urls.py

from django.urls import path

from apps.core.views import (
    MeView,
    LoginThrottleResetView,
)

urlpatterns = [
    path("me/", MeView.as_view(), name="core-me"),
    path(
        "login-throttle/reset/",
        LoginThrottleResetView.as_view(),
        name="core-login-throttle-reset",
    ),
]

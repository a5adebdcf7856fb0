import json
import logging

import pytest
from django.db import DatabaseError
from django.test import RequestFactory, override_settings

from apps.api.common.middleware import INTERNAL_ERROR_DETAIL, UnhandledExceptionMiddleware


@pytest.fixture
def middleware():
    return UnhandledExceptionMiddleware(lambda request: None)


class TestUnhandledExceptionMiddleware:
    def test_generic_body_without_exception_text(self, middleware, caplog):
        request = RequestFactory().post("/api/v1/video/sessions/start/")
        caplog.set_level(logging.ERROR, logger="apps.api.common.middleware")

        response = middleware.process_exception(request, DatabaseError("password=hunter2 timeout"))

        assert response.status_code == 500
        body = json.loads(response.content)
        assert body == {"detail": INTERNAL_ERROR_DETAIL}
        assert "hunter2" not in response.content.decode()
        assert "Unhandled exception" in caplog.text

    @override_settings(CORS_ALLOWED_ORIGINS=["https://app.example.com"], CORS_ALLOW_CREDENTIALS=True)
    def test_cors_headers_for_allowed_origin(self, middleware):
        request = RequestFactory().get("/", HTTP_ORIGIN="https://app.example.com")

        response = middleware.process_exception(request, RuntimeError("boom"))

        assert response["Access-Control-Allow-Origin"] == "https://app.example.com"
        assert response["Access-Control-Allow-Credentials"] == "true"


@pytest.mark.django_db
class TestHealthCheck:
    def test_healthy(self, client, monkeypatch):
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.delenv("REDIS_HOST", raising=False)
        res = client.get("/healthz/")
        assert res.status_code == 200
        body = res.json()
        assert body["database"] == "connected"
        assert body["redis"] == "unavailable"

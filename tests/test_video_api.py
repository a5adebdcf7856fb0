import uuid

import pytest
from django.urls import reverse

from apps.support.video.models import VideoEvent, WatchSession

START = "/api/v1/video/sessions/start/"
UPDATE = "/api/v1/video/sessions/update/"
END = "/api/v1/video/sessions/end/"
CLEANUP = "/api/v1/video/sessions/cleanup/"
EVENTS = "/api/v1/video/events/"
HISTORY = "/api/v1/video/sessions/"
ANALYTICS = "/api/v1/video/analytics/teacher/"


def start(client, content):
    res = client.post(START, {"contentId": content.pk}, format="json")
    assert res.status_code == 201, res.content
    return res.json()["sessionId"]


@pytest.mark.django_db
class TestAuthentication:
    @pytest.mark.parametrize("url", [START, UPDATE, END, CLEANUP, EVENTS])
    def test_post_requires_auth(self, api_client, url):
        res = api_client.post(url, {}, format="json")
        assert res.status_code == 401

    def test_analytics_requires_auth(self, api_client):
        assert api_client.get(ANALYTICS).status_code == 401


@pytest.mark.django_db
class TestSessionEndpoints:
    def test_full_lifecycle(self, auth_client, learner, content):
        client = auth_client(learner)
        sid = start(client, content)

        res = client.post(UPDATE, {"sessionId": sid, "watchedSeconds": 50}, format="json")
        assert res.status_code == 200
        assert res.json() == {"success": True}

        res = client.post(END, {"sessionId": sid, "watchedSeconds": 70}, format="json")
        assert res.status_code == 200
        body = res.json()
        assert body["sessionId"] == sid
        assert body["watchedSeconds"] == 70
        assert body["isActive"] is False

        res = client.post(END, {"sessionId": sid, "watchedSeconds": 70}, format="json")
        assert res.status_code == 404

    def test_start_uses_request_ip_and_agent(self, auth_client, learner, content):
        client = auth_client(learner)
        res = client.post(
            START,
            {"contentId": content.pk},
            format="json",
            REMOTE_ADDR="192.0.2.10",
            HTTP_USER_AGENT="TestAgent/1.0",
        )
        session = WatchSession.objects.get(pk=res.json()["sessionId"])
        assert session.ip_address == "192.0.2.10"
        assert session.user_agent == "TestAgent/1.0"

    def test_start_forbidden_without_entitlement(self, auth_client, outsider, content):
        res = auth_client(outsider).post(START, {"contentId": content.pk}, format="json")
        assert res.status_code == 403

    def test_start_unknown_content(self, auth_client, learner):
        res = auth_client(learner).post(START, {"contentId": 999999}, format="json")
        assert res.status_code == 404

    def test_start_missing_content_id(self, auth_client, learner):
        res = auth_client(learner).post(START, {}, format="json")
        assert res.status_code == 400

    def test_start_with_someone_elses_viewer_id(self, auth_client, learner, teacher, content):
        res = auth_client(learner).post(
            START, {"contentId": content.pk, "viewerId": teacher.pk}, format="json"
        )
        assert res.status_code == 403

    def test_start_with_own_viewer_id(self, auth_client, learner, content):
        res = auth_client(learner).post(
            START, {"contentId": content.pk, "viewerId": learner.pk}, format="json"
        )
        assert res.status_code == 201

    def test_update_negative_is_400(self, auth_client, learner, content):
        client = auth_client(learner)
        sid = start(client, content)
        res = client.post(UPDATE, {"sessionId": sid, "watchedSeconds": -5}, format="json")
        assert res.status_code == 400

    def test_update_foreign_session_is_404(self, auth_client, learner, teacher, content):
        sid = start(auth_client(learner), content)
        res = auth_client(teacher).post(
            UPDATE, {"sessionId": sid, "watchedSeconds": 5}, format="json"
        )
        assert res.status_code == 404

    def test_update_unknown_session_is_404(self, auth_client, learner):
        res = auth_client(learner).post(
            UPDATE, {"sessionId": str(uuid.uuid4()), "watchedSeconds": 5}, format="json"
        )
        assert res.status_code == 404

    def test_cleanup(self, auth_client, learner, content):
        client = auth_client(learner)
        start(client, content)

        res = client.post(CLEANUP, format="json")

        assert res.status_code == 200
        assert res.json() == {"success": True, "closed": 1}
        assert client.post(CLEANUP, format="json").json()["closed"] == 0

    def test_history_lists_only_own_sessions(self, auth_client, learner, teacher, content):
        client = auth_client(learner)
        start(client, content)
        start(client, content)
        start(auth_client(teacher), content)

        body = client.get(HISTORY).json()
        assert body["count"] == 2

        active = client.get(HISTORY, {"is_active": "true"}).json()
        assert active["count"] == 1


@pytest.mark.django_db
class TestEventEndpoint:
    def test_records_event(self, auth_client, learner, content):
        client = auth_client(learner)
        sid = start(client, content)

        res = client.post(
            EVENTS,
            {"sessionId": sid, "eventType": "pause", "videoTimestampSeconds": 3.5, "metadata": {"k": "v"}},
            format="json",
        )

        assert res.status_code == 200
        assert res.json() == {"success": True}
        event = VideoEvent.objects.get(session_id=sid)
        assert event.metadata == {"k": "v"}

    def test_terminal_event_closes(self, auth_client, learner, content):
        client = auth_client(learner)
        sid = start(client, content)

        client.post(
            EVENTS,
            {"sessionId": sid, "eventType": "ended", "videoTimestampSeconds": 100},
            format="json",
        )

        session = WatchSession.objects.get(pk=sid)
        assert session.is_active is False
        assert session.completion_percent == 100

    def test_unknown_event_type_is_400(self, auth_client, learner, content):
        client = auth_client(learner)
        sid = start(client, content)
        res = client.post(
            EVENTS,
            {"sessionId": sid, "eventType": "teleport", "videoTimestampSeconds": 1},
            format="json",
        )
        assert res.status_code == 400

    def test_foreign_session_is_404(self, auth_client, learner, teacher, content):
        sid = start(auth_client(learner), content)
        res = auth_client(teacher).post(
            EVENTS,
            {"sessionId": sid, "eventType": "play", "videoTimestampSeconds": 0},
            format="json",
        )
        assert res.status_code == 404


@pytest.mark.django_db
class TestAnalyticsEndpoint:
    def test_teacher_summary(self, auth_client, teacher, learner, content):
        start(auth_client(learner), content)

        res = auth_client(teacher).get(ANALYTICS)

        assert res.status_code == 200
        body = res.json()
        assert set(body) == {"sessions", "stats", "studentStats", "classStats"}
        assert body["stats"]["totalSessions"] == 1

    def test_learner_is_403(self, auth_client, learner):
        assert auth_client(learner).get(ANALYTICS).status_code == 403

    def test_unassigned_course_is_403(self, auth_client, teacher, other_course):
        res = auth_client(teacher).get(ANALYTICS, {"courseId": other_course.pk})
        assert res.status_code == 403

    def test_bad_course_id_is_400(self, auth_client, teacher):
        res = auth_client(teacher).get(ANALYTICS, {"courseId": "abc"})
        assert res.status_code == 400

    def test_viewer_filter(self, auth_client, teacher, learner, content):
        start(auth_client(learner), content)
        res = auth_client(teacher).get(ANALYTICS, {"viewerId": learner.pk})

        assert res.status_code == 200
        (student,) = res.json()["studentStats"]
        assert student["viewerId"] == learner.pk
        assert student["contents"][0]["contentId"] == content.pk

    def test_bad_viewer_id_is_400(self, auth_client, teacher):
        res = auth_client(teacher).get(ANALYTICS, {"viewerId": "x"})
        assert res.status_code == 400

    def test_route_names(self):
        assert reverse("video-analytics-teacher") == ANALYTICS

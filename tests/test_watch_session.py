import threading
import uuid
from datetime import timedelta

import pytest
from django.db import IntegrityError, connection, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.domains.courses.models import Content
from apps.support.video.exceptions import (
    ContentAccessDenied,
    ContentNotFound,
    WatchSessionNotFound,
)
from apps.support.video.models import WatchSession
from apps.support.video.services.event_recorder import record_event
from apps.support.video.services.watch_session import (
    cleanup_sessions,
    close_stale_sessions,
    end_session,
    start_session,
    update_session,
)


def active_count(viewer, content):
    return WatchSession.objects.filter(viewer=viewer, content=content, is_active=True).count()


@pytest.mark.django_db
class TestStart:
    def test_creates_active_session_with_duration_snapshot(self, learner, content):
        result = start_session(learner.pk, content.pk, ip_address="10.0.0.1", user_agent="UA")

        session = WatchSession.objects.get(pk=result.session_id)
        assert session.is_active
        assert session.viewer_id == learner.pk
        assert session.duration_seconds == 100
        assert session.ip_address == "10.0.0.1"
        assert session.user_agent == "UA"
        assert result.warning is None

    def test_restart_closes_prior_session(self, learner, content):
        s1 = start_session(learner.pk, content.pk).session_id
        s2 = start_session(learner.pk, content.pk).session_id

        first = WatchSession.objects.get(pk=s1)
        second = WatchSession.objects.get(pk=s2)
        assert first.is_active is False
        assert first.ended_at is not None
        assert second.is_active is True

    def test_at_most_one_active_per_pair(self, learner, content):
        for _ in range(5):
            start_session(learner.pk, content.pk)
        assert active_count(learner, content) == 1
        assert WatchSession.objects.filter(viewer=learner).count() == 5

    def test_other_contents_stay_active(self, learner, course, content):
        second = Content.objects.create(course=course, title="Lesson 2", duration_seconds=50)
        start_session(learner.pk, content.pk)
        start_session(learner.pk, second.pk)
        assert WatchSession.objects.filter(viewer=learner, is_active=True).count() == 2

    def test_not_entitled(self, outsider, content):
        with pytest.raises(ContentAccessDenied):
            start_session(outsider.pk, content.pk)
        assert not WatchSession.objects.exists()

    def test_unknown_content(self, learner):
        with pytest.raises(ContentNotFound):
            start_session(learner.pk, 987654)

    def test_constraint_rejects_second_active_row(self, learner, content):
        start_session(learner.pk, content.pk)
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                WatchSession.objects.create(viewer=learner, content=content, is_active=True)


@pytest.mark.django_db
class TestUpdate:
    def test_updates_watched_and_completion(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id

        session = update_session(sid, learner.pk, 50)

        assert session.watched_seconds == 50
        assert session.completion_percent == 50
        assert session.last_seen_at is not None

    def test_completion_is_clamped(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id
        assert update_session(sid, learner.pk, 250).completion_percent == 100

    def test_unknown_duration_gives_zero_completion(self, learner, course):
        no_duration = Content.objects.create(course=course, title="Live", duration_seconds=None)
        sid = start_session(learner.pk, no_duration.pk).session_id
        assert update_session(sid, learner.pk, 30).completion_percent == 0

    def test_decrease_is_allowed(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id
        update_session(sid, learner.pk, 60)
        assert update_session(sid, learner.pk, 20).watched_seconds == 20

    @pytest.mark.parametrize("bad", [-1, "abc", None, True, float("nan")])
    def test_invalid_seconds(self, learner, content, bad):
        sid = start_session(learner.pk, content.pk).session_id
        with pytest.raises(ValidationError):
            update_session(sid, learner.pk, bad)

    def test_other_viewer_gets_not_found(self, learner, make_user, content):
        sid = start_session(learner.pk, content.pk).session_id
        stranger = make_user()
        with pytest.raises(WatchSessionNotFound):
            update_session(sid, stranger.pk, 10)

    def test_unknown_or_malformed_id(self, learner):
        with pytest.raises(WatchSessionNotFound):
            update_session(uuid.uuid4(), learner.pk, 10)
        with pytest.raises(WatchSessionNotFound):
            update_session("not-a-uuid", learner.pk, 10)


@pytest.mark.django_db
class TestEnd:
    def test_end_closes_session(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id

        session = end_session(sid, learner.pk, 75)

        assert session.is_active is False
        assert session.ended_at is not None
        assert session.watched_seconds == 75
        assert session.completion_percent == 75

    def test_second_end_is_not_found(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id
        end_session(sid, learner.pk, 10)
        with pytest.raises(WatchSessionNotFound):
            end_session(sid, learner.pk, 20)

    def test_update_after_end_is_not_found(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id
        end_session(sid, learner.pk, 10)
        with pytest.raises(WatchSessionNotFound):
            update_session(sid, learner.pk, 20)


@pytest.mark.django_db
class TestLifecycleScenario:
    def test_update_then_close_event_then_update(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id

        assert update_session(sid, learner.pk, 50).completion_percent == 50

        record_event(sid, learner.pk, "close", 80)
        session = WatchSession.objects.get(pk=sid)
        assert session.is_active is False
        assert session.watched_seconds == 80
        assert session.completion_percent == 80

        with pytest.raises(WatchSessionNotFound):
            update_session(sid, learner.pk, 90)


@pytest.mark.django_db
class TestCleanup:
    def test_closes_every_active_session_of_viewer(self, learner, make_user, course, content):
        second = Content.objects.create(course=course, title="Lesson 2")
        start_session(learner.pk, content.pk)
        start_session(learner.pk, second.pk)

        assert cleanup_sessions(learner.pk) == 2
        assert not WatchSession.objects.filter(viewer=learner, is_active=True).exists()

    def test_idempotent(self, learner, content):
        start_session(learner.pk, content.pk)
        assert cleanup_sessions(learner.pk) == 1
        assert cleanup_sessions(learner.pk) == 0

    def test_leaves_other_viewers_alone(self, learner, teacher, content):
        start_session(learner.pk, content.pk)
        start_session(teacher.pk, content.pk)
        cleanup_sessions(learner.pk)
        assert active_count(teacher, content) == 1


@pytest.mark.django_db
class TestCloseStale:
    def test_closes_only_idle_sessions(self, learner, teacher, content):
        idle = WatchSession.objects.get(pk=start_session(learner.pk, content.pk).session_id)
        fresh = WatchSession.objects.get(pk=start_session(teacher.pk, content.pk).session_id)

        old = timezone.now() - timedelta(hours=30)
        WatchSession.objects.filter(pk=idle.pk).update(started_at=old, last_seen_at=old)

        closed = close_stale_sessions(timezone.now() - timedelta(hours=12))

        assert closed == 1
        idle.refresh_from_db()
        fresh.refresh_from_db()
        assert idle.is_active is False
        assert fresh.is_active is True

    def test_falls_back_to_started_at(self, learner, content):
        sid = start_session(learner.pk, content.pk).session_id
        old = timezone.now() - timedelta(hours=30)
        WatchSession.objects.filter(pk=sid).update(started_at=old, last_seen_at=None)

        assert close_stale_sessions(timezone.now() - timedelta(hours=12)) == 1


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    not connection.features.has_select_for_update,
    reason="row locks need a backend with SELECT ... FOR UPDATE",
)
class TestConcurrentStart:
    def test_parallel_starts_leave_one_active_session(self, learner, content):
        workers = 4
        barrier = threading.Barrier(workers)
        errors = []

        def worker():
            try:
                barrier.wait()
                start_session(learner.pk, content.pk)
            except Exception as exc:  # collected for the assertion below
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert WatchSession.objects.filter(viewer=learner).count() == workers
        assert active_count(learner, content) == 1

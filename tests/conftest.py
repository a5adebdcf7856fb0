"""
Shared fixtures.

Users, courses and memberships are built directly through the ORM; HTTP
tests use DRF's APIClient with force_authenticate unless they exercise
the JWT login itself.
"""

import pytest
from rest_framework.test import APIClient

from apps.core.models import User
from apps.core.services.login_throttle import reset_login_rate_limiter
from apps.domains.courses.models import Content, Course, CourseMembership
from libs.redis import reset_redis_state


@pytest.fixture(autouse=True)
def _fresh_login_limiter():
    """Each test starts with an empty process-wide login limiter."""
    reset_login_rate_limiter()
    reset_redis_state()
    yield
    reset_login_rate_limiter()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=User.Role.LEARNER, username=None, password="pass-1234", **extra):
        counter["n"] += 1
        user = User.objects.create_user(
            username=username or f"user{counter['n']}",
            password=password,
            role=role,
            name=extra.pop("name", None) or f"User {counter['n']}",
            **extra,
        )
        return user

    return _make


@pytest.fixture
def course(db):
    return Course.objects.create(title="Algebra")


@pytest.fixture
def other_course(db):
    return Course.objects.create(title="History")


@pytest.fixture
def content(course):
    return Content.objects.create(course=course, title="Lesson 1", duration_seconds=100)


@pytest.fixture
def other_content(other_course):
    return Content.objects.create(course=other_course, title="Lesson A", duration_seconds=200)


@pytest.fixture
def learner(make_user, course):
    user = make_user(User.Role.LEARNER, username="learner")
    CourseMembership.objects.create(user=user, course=course, kind=CourseMembership.Kind.ACQUIRED)
    return user


@pytest.fixture
def outsider(make_user):
    """Learner with no acquired courses."""
    return make_user(User.Role.LEARNER, username="outsider")


@pytest.fixture
def teacher(make_user, course):
    user = make_user(User.Role.TEACHER, username="teacher")
    CourseMembership.objects.create(user=user, course=course, kind=CourseMembership.Kind.ASSIGNED)
    return user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client

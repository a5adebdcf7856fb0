import pytest

from apps.core.models import User
from apps.domains.courses.models import Content, CourseMembership
from apps.support.video.exceptions import ContentAccessDenied, ContentNotFound, ViewerNotFound
from apps.support.video.services.access_grant import check_content_access, load_access_grant


@pytest.mark.django_db
class TestLoadAccessGrant:
    def test_unknown_viewer(self):
        assert load_access_grant(999999) is None

    def test_inactive_viewer_is_unknown(self, make_user):
        user = make_user(is_active=False)
        assert load_access_grant(user.pk) is None

    def test_collects_both_membership_kinds(self, make_user, course, other_course):
        user = make_user(User.Role.TEACHER)
        CourseMembership.objects.create(user=user, course=course, kind=CourseMembership.Kind.ASSIGNED)
        CourseMembership.objects.create(user=user, course=other_course, kind=CourseMembership.Kind.ACQUIRED)

        grant = load_access_grant(user.pk)

        assert grant.assigned_course_ids == frozenset({course.pk})
        assert grant.acquired_course_ids == frozenset({other_course.pk})
        assert grant.is_teacher

    def test_superuser_is_admin(self, make_user):
        user = make_user(User.Role.LEARNER, is_superuser=True)
        grant = load_access_grant(user.pk)
        assert grant.role == User.Role.ADMIN
        assert grant.visible_course_ids() is None


@pytest.mark.django_db
class TestCheckContentAccess:
    def test_learner_with_acquired_course(self, learner, content):
        assert check_content_access(viewer_id=learner.pk, content_id=content.pk) == content

    def test_learner_without_course_is_forbidden(self, outsider, content):
        with pytest.raises(ContentAccessDenied):
            check_content_access(viewer_id=outsider.pk, content_id=content.pk)

    def test_teacher_uses_assigned_not_acquired(self, make_user, course, content):
        user = make_user(User.Role.TEACHER)
        CourseMembership.objects.create(user=user, course=course, kind=CourseMembership.Kind.ACQUIRED)

        with pytest.raises(ContentAccessDenied):
            check_content_access(viewer_id=user.pk, content_id=content.pk)

    def test_teacher_with_assigned_course(self, teacher, content):
        assert check_content_access(viewer_id=teacher.pk, content_id=content.pk) == content

    def test_admin_sees_everything(self, make_user, other_content):
        admin = make_user(User.Role.ADMIN)
        assert check_content_access(viewer_id=admin.pk, content_id=other_content.pk) == other_content

    def test_unknown_viewer(self, content):
        with pytest.raises(ViewerNotFound):
            check_content_access(viewer_id=424242, content_id=content.pk)

    def test_unknown_content(self, learner):
        with pytest.raises(ContentNotFound):
            check_content_access(viewer_id=learner.pk, content_id=424242)

    def test_inactive_content_is_not_found(self, learner, course):
        hidden = Content.objects.create(course=course, title="Draft", is_active=False)
        with pytest.raises(ContentNotFound):
            check_content_access(viewer_id=learner.pk, content_id=hidden.pk)

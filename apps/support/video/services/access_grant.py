# PATH: apps/support/video/services/access_grant.py

"""
Single source of truth for "may this viewer watch this content".

AccessGrant is a read-only snapshot of the external profile data:
role + acquired course ids (learner) + assigned course ids (teacher).
Role decides which capability set is consulted:

- ADMIN:   every course
- TEACHER: assigned courses
- LEARNER: acquired courses
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

from django.contrib.auth import get_user_model

from apps.core.models import User
from apps.domains.courses.models import Content, CourseMembership

from ..exceptions import ContentAccessDenied, ContentNotFound, ViewerNotFound


@dataclass(frozen=True)
class AccessGrant:
    viewer_id: int
    role: str
    acquired_course_ids: FrozenSet[int] = frozenset()
    assigned_course_ids: FrozenSet[int] = frozenset()

    @property
    def is_teacher(self) -> bool:
        return self.role == User.Role.TEACHER

    def visible_course_ids(self) -> Optional[FrozenSet[int]]:
        """None means unrestricted (admin)."""
        if self.role == User.Role.ADMIN:
            return None
        if self.role == User.Role.TEACHER:
            return self.assigned_course_ids
        return self.acquired_course_ids

    def can_view_course(self, course_id: int) -> bool:
        visible = self.visible_course_ids()
        if visible is None:
            return True
        return int(course_id) in visible


def load_access_grant(viewer_id) -> Optional[AccessGrant]:
    viewer = (
        get_user_model().objects
        .filter(pk=viewer_id, is_active=True)
        .only("id", "role", "is_superuser")
        .first()
    )
    if viewer is None:
        return None

    acquired, assigned = set(), set()
    rows = CourseMembership.objects.filter(user_id=viewer.pk).values_list("course_id", "kind")
    for course_id, kind in rows:
        if kind == CourseMembership.Kind.ACQUIRED:
            acquired.add(course_id)
        elif kind == CourseMembership.Kind.ASSIGNED:
            assigned.add(course_id)

    return AccessGrant(
        viewer_id=viewer.pk,
        role=viewer.effective_role,
        acquired_course_ids=frozenset(acquired),
        assigned_course_ids=frozenset(assigned),
    )


def check_content_access(*, viewer_id, content_id) -> Content:
    """
    Returns the Content when the viewer is entitled.

    Raises ViewerNotFound / ContentNotFound for unknown ids and
    ContentAccessDenied when the role's course set does not cover the
    content's course.
    """
    grant = load_access_grant(viewer_id)
    if grant is None:
        raise ViewerNotFound()

    content = (
        Content.objects
        .select_related("course")
        .filter(pk=content_id, is_active=True)
        .first()
    )
    if content is None:
        raise ContentNotFound()

    if not grant.can_view_course(content.course_id):
        raise ContentAccessDenied()

    return content

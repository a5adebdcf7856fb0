from django.conf import settings
from django.db import models

from apps.core.models.base import TimestampModel


# ========================================================
# Course
# ========================================================

class Course(TimestampModel):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-id"]

    def __str__(self):
        return self.title


# ========================================================
# Content (one video lesson, belongs to exactly one course)
# ========================================================

class Content(TimestampModel):
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="contents",
    )

    title = models.CharField(max_length=255)
    order = models.PositiveIntegerField(default=1)

    # null = duration unknown (completion stays 0)
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["course", "order", "id"]

    def __str__(self):
        return f"{self.course.title} - {self.title}"


# ========================================================
# CourseMembership (access grant source)
# ========================================================

class CourseMembership(TimestampModel):
    """
    Which courses a user may see.

    - ACQUIRED: learner bought / was enrolled in the course
    - ASSIGNED: teacher teaches the course (analytics scope)
    """

    class Kind(models.TextChoices):
        ACQUIRED = "ACQUIRED", "Acquired"
        ASSIGNED = "ASSIGNED", "Assigned"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_memberships",
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    kind = models.CharField(
        max_length=16,
        choices=Kind.choices,
        db_index=True,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course", "kind"],
                name="unique_course_membership",
            )
        ]
        indexes = [
            models.Index(fields=["user", "kind"], name="course_member_user_kind_idx"),
        ]

    def __str__(self):
        return f"{self.user} {self.kind} {self.course}"

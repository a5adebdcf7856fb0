# PATH: apps/core/management/commands/ensure_dev_user.py
"""
Local development seed: one teacher, one learner, one course with a
content item, and the memberships that connect them.

- course/content are created if missing (matched by title)
- users are created if missing; passwords are always reset to --password
- teacher gets ASSIGNED, learner gets ACQUIRED on the course

Usage:
  python manage.py ensure_dev_user
  python manage.py ensure_dev_user --password=devpass123 --course="Demo course"
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.domains.courses.models import Content, Course, CourseMembership


class Command(BaseCommand):
    help = "Ensure dev teacher + learner + course/content with memberships for local testing."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="devpass123",
            help="Password for both users (default: devpass123)",
        )
        parser.add_argument(
            "--teacher",
            type=str,
            default="teacher",
            help="Teacher username (default: teacher)",
        )
        parser.add_argument(
            "--learner",
            type=str,
            default="learner",
            help="Learner username (default: learner)",
        )
        parser.add_argument(
            "--course",
            type=str,
            default="Demo course",
            help="Course title (default: Demo course)",
        )
        parser.add_argument(
            "--duration",
            type=int,
            default=600,
            help="Content duration in seconds (default: 600)",
        )

    def _ensure_user(self, username, password, role):
        User = get_user_model()
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"name": username.title(), "role": role, "is_active": True},
        )
        user.set_password(password)
        user.role = role
        user.is_active = True
        user.save(update_fields=["password", "role", "is_active"])
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created User: username={username}, role={role}"))
        else:
            self.stdout.write(f"Updated User: username={username}, role={role}, password set")
        return user

    def handle(self, *args, **options):
        password = (options["password"] or "devpass123").strip()
        course_title = (options["course"] or "Demo course").strip()
        User = get_user_model()

        with transaction.atomic():
            # 1) Course + Content
            course, course_created = Course.objects.get_or_create(
                title=course_title,
                defaults={"description": "Seeded for local development", "is_active": True},
            )
            if course_created:
                self.stdout.write(self.style.SUCCESS(f"Created Course: id={course.id}, title={course.title}"))
            else:
                self.stdout.write(f"Course already exists: id={course.id}")

            content, content_created = Content.objects.get_or_create(
                course=course,
                title="Lesson 1",
                defaults={"order": 1, "duration_seconds": options["duration"], "is_active": True},
            )
            if content_created:
                self.stdout.write(self.style.SUCCESS(f"Created Content: id={content.id}"))
            else:
                self.stdout.write(f"Content already exists: id={content.id}")

            # 2) Users
            teacher = self._ensure_user(options["teacher"].strip(), password, User.Role.TEACHER)
            learner = self._ensure_user(options["learner"].strip(), password, User.Role.LEARNER)

            # 3) Memberships
            CourseMembership.objects.get_or_create(
                user=teacher, course=course, kind=CourseMembership.Kind.ASSIGNED,
            )
            CourseMembership.objects.get_or_create(
                user=learner, course=course, kind=CourseMembership.Kind.ACQUIRED,
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Done. course={course.id} content={content.id} "
                f"teacher={teacher.username} learner={learner.username} password={password}"
            )
        )

# PATH: apps/support/video/management/commands/close_stale_watch_sessions.py
"""
Close watch sessions left active by clients that vanished without ending them.

Run via cron (e.g. hourly):
  python manage.py close_stale_watch_sessions
  python manage.py close_stale_watch_sessions --hours 6
"""
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.support.video.services.watch_session import close_stale_sessions


class Command(BaseCommand):
    help = "Close ACTIVE watch sessions with no activity for --hours (default VIDEO_STALE_SESSION_HOURS)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=float,
            default=None,
            help="Inactivity threshold in hours",
        )

    def handle(self, *args, **options):
        hours = options["hours"]
        if hours is None:
            hours = float(getattr(settings, "VIDEO_STALE_SESSION_HOURS", 12))
        if hours <= 0:
            raise CommandError("--hours must be > 0")

        cutoff = timezone.now() - timedelta(hours=hours)
        closed = close_stale_sessions(cutoff)
        self.stdout.write(self.style.SUCCESS(f"Closed {closed} stale session(s)"))

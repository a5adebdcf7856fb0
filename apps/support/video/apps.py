from django.apps import AppConfig


class VideoConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"

    name = "apps.support.video"

    # migration / FK label: do not change
    label = "video"

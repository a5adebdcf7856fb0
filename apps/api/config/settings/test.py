# PATH: apps/api/config/settings/test.py
from .base import *

# ==================================================
# TEST MODE (pytest-django)
# ==================================================

DEBUG = False
ALLOWED_HOSTS = ["*"]
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

LOGIN_RATE_LIMIT = {
    **LOGIN_RATE_LIMIT,
    "BACKEND": "memory",
    "MIN_INTERVAL_SECONDS": 0,
}

VIDEO_TRUST_X_FORWARDED_FOR = False

LOGGING["root"]["level"] = "WARNING"

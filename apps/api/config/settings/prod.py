# PATH: apps/api/config/settings/prod.py
from .base import *
import os

# ==================================================
# PROD MODE (public API server)
# ==================================================

DEBUG = False

SECRET_KEY = os.environ["DJANGO_SECRET_KEY"]

# ==================================================
# SECURITY
# ==================================================

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
USE_X_FORWARDED_HOST = True

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# ==================================================
# ALLOWED HOSTS
# ==================================================
# "*" is never allowed in prod

ALLOWED_HOSTS = [
    h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "").split(",") if h.strip()
]

# ==================================================
# CORS (frontend <-> API)
# ==================================================

CORS_ALLOW_ALL_ORIGINS = False

CORS_ALLOWED_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()
]

CORS_ALLOW_CREDENTIALS = True

# ==================================================
# CSRF
# ==================================================

CSRF_TRUSTED_ORIGINS = list(CORS_ALLOWED_ORIGINS)

# ==================================================
# LOGIN RATE LIMIT
# ==================================================
# several API processes -> the counters must be shared

LOGIN_RATE_LIMIT["BACKEND"] = os.environ.get("LOGIN_RATE_LIMIT_BACKEND", "redis")

# ==================================================
# STATIC
# ==================================================
# gunicorn + nginx + CDN; Django does not serve files

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.ManifestStaticFilesStorage"},
}

# ==================================================
# FINAL ASSERTIONS
# ==================================================

assert DEBUG is False, "prod.py must run with DEBUG=False"
assert ALLOWED_HOSTS and "*" not in ALLOWED_HOSTS, "prod.py needs explicit DJANGO_ALLOWED_HOSTS"
assert SECRET_KEY != "dev-secret-key", "prod.py needs a real DJANGO_SECRET_KEY"

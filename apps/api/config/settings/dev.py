from .base import *

DEBUG = True
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS += [
    "debug_toolbar",
]

MIDDLEWARE.insert(0, "debug_toolbar.middleware.DebugToolbarMiddleware")

INTERNAL_IPS = [
    "127.0.0.1",
]

# local runs: 1 second gap between failed logins is enough
LOGIN_RATE_LIMIT["MIN_INTERVAL_SECONDS"] = 1

LOGGING["root"]["level"] = "DEBUG"

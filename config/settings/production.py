"""
Production settings for the family wealth tracker.

Importing this module fails with ImproperlyConfigured unless the secret key,
host list, Postgres credentials and any WEALTH_* overrides are present and valid.
"""

import os

from config.logging import APP_LOGGERS, get_logging_config
from config.startup_checks import validate_production_config

from .base import *  # noqa: F403

validate_production_config()

DEBUG = False

SECRET_KEY = os.environ["SECRET_KEY"]
ALLOWED_HOSTS = [h.strip() for h in os.environ["ALLOWED_HOSTS"].split(",") if h.strip()]

# The admin is served behind a TLS-terminating proxy
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 60 * 60 * 24 * 365
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SESSION_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_SECURE = True

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ["DB_NAME"],
        "USER": os.environ["DB_USER"],
        "PASSWORD": os.environ["DB_PASSWORD"],
        "HOST": os.getenv("DB_HOST", "localhost"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "ATOMIC_REQUESTS": True,
        "CONN_MAX_AGE": 600,
        "CONN_HEALTH_CHECKS": True,
        "OPTIONS": {"connect_timeout": 10},
    }
}

LOGS_DIR = BASE_DIR / "logs"  # noqa: F405
LOGS_DIR.mkdir(exist_ok=True)

# Rebalance reports and engine warnings are kept as JSON lines on disk
LOGGING = get_logging_config(debug=False)
LOGGING["handlers"]["file"] = {
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "wealth.log",
    "maxBytes": 10 * 1024 * 1024,
    "backupCount": 5,
    "formatter": "json",
    "level": "INFO",
}
LOGGING["root"]["handlers"] = ["console", "file"]
for name in APP_LOGGERS:
    LOGGING["loggers"][name]["handlers"] = ["console", "file"]

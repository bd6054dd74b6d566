from config.logging import get_logging_config

from .base import *  # noqa: F403

DEBUG = False

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Pin engine defaults so environment overrides don't leak into tests
WEALTH_DEFAULT_REBALANCE_THRESHOLD = "5"
WEALTH_SIP_ADJUSTMENT_TOLERANCE = "10"
WEALTH_HIGH_PRIORITY_DEVIATION = "10"

# Engine warnings (e.g. lumpsum_not_conserved) are asserted via mocks, not output
LOGGING = get_logging_config(debug=False, app_level="CRITICAL")
LOGGING["root"]["level"] = "WARNING"

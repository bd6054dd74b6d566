from .base import *  # noqa: F403

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "[::1]"]

# Simplify password validation for development
AUTH_PASSWORD_VALIDATORS = []


# Development-specific logging: verbose output with colors
from config.logging import configure_structlog, get_logging_config  # noqa: E402

configure_structlog(debug=True)
LOGGING = get_logging_config(debug=True, app_level="DEBUG")

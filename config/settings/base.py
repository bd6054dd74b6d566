"""
Django settings for the family wealth tracker.

Base settings shared by all environments.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv("SECRET_KEY") or "django-insecure-placeholder-key-for-tests-and-local-dev"

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv("DEBUG", "False") == "True"

# Configure logging early (before Django uses it)
from config.logging import configure_structlog, get_logging_config  # noqa: E402

configure_structlog(debug=DEBUG)

ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h.strip()]
if not ALLOWED_HOSTS and DEBUG:
    ALLOWED_HOSTS = ["localhost", "127.0.0.1", "[::1]"]


# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "wealth",
]


MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"


# ============================================================================
# DATABASE CONFIGURATION
# ============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
        "ATOMIC_REQUESTS": True,
    }
}


# ============================================================================
# PASSWORD VALIDATION
# ============================================================================

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {
            "min_length": 12,
        },
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]


# Internationalization

LANGUAGE_CODE = "en-us"

TIME_ZONE = "Asia/Kolkata"

USE_I18N = True

USE_TZ = True


# ============================================================================
# STATIC FILES
# ============================================================================

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Rebalancing engine

# Threshold (percentage points) given to new portfolios
WEALTH_DEFAULT_REBALANCE_THRESHOLD = os.getenv("WEALTH_DEFAULT_REBALANCE_THRESHOLD", "5")

# Smart vs. normal SIP differences at or below this amount are not flagged
WEALTH_SIP_ADJUSTMENT_TOLERANCE = os.getenv("WEALTH_SIP_ADJUSTMENT_TOLERANCE", "10")

# Asset-class alerts deviating by more than this many points are HIGH priority
WEALTH_HIGH_PRIORITY_DEVIATION = os.getenv("WEALTH_HIGH_PRIORITY_DEVIATION", "10")

from config.startup_checks import validate_wealth_settings  # noqa: E402

validate_wealth_settings(
    {
        "WEALTH_DEFAULT_REBALANCE_THRESHOLD": WEALTH_DEFAULT_REBALANCE_THRESHOLD,
        "WEALTH_SIP_ADJUSTMENT_TOLERANCE": WEALTH_SIP_ADJUSTMENT_TOLERANCE,
        "WEALTH_HIGH_PRIORITY_DEVIATION": WEALTH_HIGH_PRIORITY_DEVIATION,
    }
)

# Logging Configuration
# Using structlog for structured logging with Django's logging system
LOGGING = get_logging_config(debug=DEBUG)

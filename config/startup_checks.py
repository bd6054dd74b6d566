"""
Startup validation checks.

Base settings run ``validate_wealth_settings`` on the rebalancing knobs and
production settings also call ``validate_production_config``, so a missing
secret or a malformed knob stops the process at boot.
"""

import os
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ImproperlyConfigured

REQUIRED_PRODUCTION_VARS = (
    "SECRET_KEY",
    "ALLOWED_HOSTS",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
)

# setting name -> (minimum, maximum); None means unbounded
WEALTH_NUMERIC_SETTINGS: dict[str, tuple[Decimal, Decimal | None]] = {
    "WEALTH_DEFAULT_REBALANCE_THRESHOLD": (Decimal("0"), Decimal("100")),
    "WEALTH_SIP_ADJUSTMENT_TOLERANCE": (Decimal("0"), None),
    "WEALTH_HIGH_PRIORITY_DEVIATION": (Decimal("0"), Decimal("100")),
}


def validate_wealth_settings(values: Mapping[str, object]) -> None:
    """
    Check that the rebalancing settings parse as decimals within range.

    Missing keys are skipped; the settings module supplies defaults for them.

    Raises:
        ImproperlyConfigured: naming every offending setting.
    """
    problems = []
    for name, (minimum, maximum) in WEALTH_NUMERIC_SETTINGS.items():
        if name not in values:
            continue
        raw = values[name]
        try:
            number = Decimal(str(raw))
        except InvalidOperation:
            problems.append(f"{name}={raw!r} is not a number")
            continue
        if not number.is_finite() or number < minimum or (maximum is not None and number > maximum):
            upper = maximum if maximum is not None else "inf"
            problems.append(f"{name}={raw!r} must be between {minimum} and {upper}")

    if problems:
        raise ImproperlyConfigured("Invalid rebalancing settings: " + "; ".join(problems))


def validate_production_config() -> None:
    """
    Validate environment variables required for a production deployment.

    Raises:
        ImproperlyConfigured: If required variables are missing or any
            ``WEALTH_*`` override is malformed.
    """
    missing = [var for var in REQUIRED_PRODUCTION_VARS if not os.getenv(var)]

    if missing:
        raise ImproperlyConfigured(
            f"Missing required environment variables for production: {', '.join(missing)}\n"
            f"Please set these in your environment or .env file."
        )

    allowed_hosts = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h.strip()]
    if not allowed_hosts:
        raise ImproperlyConfigured(
            "ALLOWED_HOSTS environment variable must contain at least one hostname"
        )

    validate_wealth_settings(
        {name: os.environ[name] for name in WEALTH_NUMERIC_SETTINGS if name in os.environ}
    )

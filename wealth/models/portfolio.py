from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from wealth.managers import FundHoldingManager, PortfolioManager

PERCENT_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))]


def default_rebalance_threshold() -> Decimal:
    return Decimal(str(getattr(settings, "WEALTH_DEFAULT_REBALANCE_THRESHOLD", "5")))


class Portfolio(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="portfolios",
    )
    name = models.CharField(max_length=100)
    rebalance_threshold = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=default_rebalance_threshold,
        validators=PERCENT_VALIDATORS,
        help_text="Minimum deviation (percentage points) before buy/sell is recommended",
    )
    sip_target = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Monthly SIP amount to distribute across funds",
    )
    lumpsum_target = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="One-time lump sum to distribute across funds",
    )

    objects = PortfolioManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "name"], name="unique_portfolio_name_per_user"),
        ]
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.user.username})"

    def save(self, *args: Any, **kwargs: Any) -> None:  # noqa: DJ012
        """Save portfolio with validation."""
        self.full_clean(exclude=["user"])
        super().save(*args, **kwargs)


class FundHolding(models.Model):
    """A fund's position and target inside one portfolio."""

    portfolio = models.ForeignKey(Portfolio, on_delete=models.CASCADE, related_name="holdings")
    fund = models.ForeignKey("Fund", on_delete=models.PROTECT, related_name="holdings")
    current_value = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    target_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=PERCENT_VALIDATORS,
        help_text="Target share of portfolio value; empty means not part of the plan",
    )

    objects = FundHoldingManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["portfolio", "fund"], name="unique_fund_per_portfolio"),
        ]
        ordering = ["portfolio", "id"]

    def __str__(self) -> str:
        return f"{self.fund.scheme_code} in {self.portfolio.name}"


class AssetClassTarget(models.Model):
    """Portfolio-level target percentage for an asset class."""

    portfolio = models.ForeignKey(
        Portfolio, on_delete=models.CASCADE, related_name="asset_class_targets"
    )
    asset_class = models.ForeignKey(
        "AssetClass", on_delete=models.PROTECT, related_name="portfolio_targets"
    )
    target_percent = models.DecimalField(
        max_digits=5, decimal_places=2, validators=PERCENT_VALIDATORS
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["portfolio", "asset_class"], name="unique_asset_class_target_per_portfolio"
            ),
        ]
        ordering = ["portfolio", "asset_class__name"]

    def __str__(self) -> str:
        return f"{self.portfolio.name}: {self.asset_class.name} {self.target_percent}%"

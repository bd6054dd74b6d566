from __future__ import annotations

from django.db import models


class AssetClass(models.Model):
    """Broad category of investments (e.g., Equity, Debt, Gold)."""

    name = models.CharField(
        max_length=100, unique=True, help_text="Asset class name (e.g., 'Equity')"
    )

    class Meta:
        verbose_name_plural = "Asset Classes"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Fund(models.Model):
    """A mutual fund scheme that portfolios can hold."""

    scheme_code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    asset_class = models.ForeignKey(
        AssetClass,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="funds",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.scheme_code} - {self.name}"

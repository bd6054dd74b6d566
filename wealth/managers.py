from __future__ import annotations

from typing import Any

from django.db import models


class PortfolioQuerySet(models.QuerySet):
    def for_user(self, user: Any) -> PortfolioQuerySet:
        return self.filter(user=user)


class PortfolioManager(models.Manager):
    def get_queryset(self) -> PortfolioQuerySet:
        return PortfolioQuerySet(self.model, using=self._db)

    def for_user(self, user: Any) -> PortfolioQuerySet:
        return self.get_queryset().for_user(user)


class FundHoldingQuerySet(models.QuerySet):
    def for_portfolio(self, portfolio_id: int) -> FundHoldingQuerySet:
        return self.filter(portfolio_id=portfolio_id)

    def with_fund_details(self) -> FundHoldingQuerySet:
        return self.select_related("fund", "fund__asset_class")


class FundHoldingManager(models.Manager):
    def get_queryset(self) -> FundHoldingQuerySet:
        return FundHoldingQuerySet(self.model, using=self._db)

    def for_portfolio(self, portfolio_id: int) -> FundHoldingQuerySet:
        # Insertion order is the allocation plan order
        return self.get_queryset().for_portfolio(portfolio_id).with_fund_details().order_by("id")

"""Django ORM implementations of the holdings and asset-class providers."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ObjectDoesNotExist
from django.db.models import QuerySet

import pandas as pd
import structlog

from wealth.domain import FundHolding
from wealth.exceptions import PortfolioNotFoundError
from wealth.services.providers import (
    AssetClassMap,
    AssetClassTargets,
    PortfolioHoldings,
    PortfolioId,
)

logger = structlog.get_logger(__name__)

HOLDING_COLUMNS = ["fund_id", "fund_name", "asset_class", "current_value", "target_percent"]


def _optional_decimal(value: object) -> Decimal | None:
    if value is None or pd.isna(value):
        return None
    return Decimal(str(value))


class DjangoHoldingsProvider:
    """Reads portfolios and fund holdings from the database.

    With a ``user`` the provider only sees that family member's portfolios;
    any other id is reported as not found.
    """

    def __init__(self, user: Any | None = None) -> None:
        self.user = user

    def _portfolios(self) -> QuerySet:
        from wealth.models import Portfolio

        if self.user is None:
            return Portfolio.objects.all()
        return Portfolio.objects.for_user(self.user)

    def get_holdings_df(self, portfolio_id: PortfolioId) -> pd.DataFrame:
        """
        Get one portfolio's holdings as a DataFrame in allocation plan order.

        Returns DataFrame with columns:
            fund_id, fund_name, asset_class, current_value, target_percent

        Monetary and percent columns keep their Decimal values (object dtype).
        """
        from wealth.models import FundHolding as FundHoldingModel

        qs = FundHoldingModel.objects.for_portfolio(portfolio_id).values_list(
            "fund__scheme_code",
            "fund__name",
            "fund__asset_class__name",
            "current_value",
            "target_percent",
        )

        rows = list(qs)
        if not rows:
            return pd.DataFrame(columns=HOLDING_COLUMNS)

        return pd.DataFrame.from_records(rows, columns=HOLDING_COLUMNS)

    def get_portfolio_holdings(self, portfolio_id: PortfolioId) -> PortfolioHoldings:
        try:
            portfolio = self._portfolios().get(pk=portfolio_id)
        except ObjectDoesNotExist as e:
            raise PortfolioNotFoundError(f"Portfolio {portfolio_id} not found") from e

        df = self.get_holdings_df(portfolio_id)
        holdings = tuple(
            FundHolding(
                fund_id=row.fund_id,
                current_value=row.current_value,
                target_percent=_optional_decimal(row.target_percent),
            )
            for row in df.itertuples(index=False)
        )

        logger.debug(
            "portfolio_holdings_loaded",
            portfolio_id=portfolio_id,
            holding_count=len(holdings),
        )

        return PortfolioHoldings(
            portfolio_id=portfolio.pk,
            name=portfolio.name,
            holdings=holdings,
            rebalance_threshold=portfolio.rebalance_threshold,
            sip_target=portfolio.sip_target,
            lumpsum_target=portfolio.lumpsum_target,
        )

    def list_portfolio_ids(self) -> list[PortfolioId]:
        return list(self._portfolios().values_list("pk", flat=True))


class DjangoAssetClassProvider:
    """Asset-class grouping backed by Fund.asset_class and AssetClassTarget rows."""

    def __init__(self, holdings_provider: DjangoHoldingsProvider | None = None) -> None:
        self._holdings = holdings_provider or DjangoHoldingsProvider()

    def get_asset_class_map(self, portfolio_id: PortfolioId) -> AssetClassMap:
        df = self._holdings.get_holdings_df(portfolio_id)
        if df.empty:
            return {}

        labelled = df.dropna(subset=["asset_class"])
        return dict(zip(labelled["fund_id"], labelled["asset_class"], strict=True))

    def get_asset_class_targets(self, portfolio_id: PortfolioId) -> AssetClassTargets:
        from wealth.models import AssetClassTarget

        qs = AssetClassTarget.objects.filter(portfolio_id=portfolio_id).values_list(
            "asset_class__name", "target_percent"
        )
        return {name: pct for name, pct in qs}

"""Protocol definitions for the data the allocation engine consumes."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from wealth.domain import FundHolding

type PortfolioId = Any
type AssetClassMap = dict[str, str]  # {fund_id: asset_class_name}
type AssetClassTargets = dict[str, Decimal]  # {asset_class_name: target_pct}


@dataclass(frozen=True)
class PortfolioHoldings:
    """Holdings plus the portfolio metadata needed to plan a rebalance."""

    portfolio_id: PortfolioId
    name: str
    holdings: tuple[FundHolding, ...]
    rebalance_threshold: Decimal
    sip_target: Decimal = Decimal("0")
    lumpsum_target: Decimal = Decimal("0")


class HoldingsProvider(Protocol):
    """Protocol for the holdings/portfolio-metadata source."""

    def get_portfolio_holdings(self, portfolio_id: PortfolioId) -> PortfolioHoldings:
        """Get holdings and metadata; raise PortfolioNotFoundError when unknown."""
        ...

    def list_portfolio_ids(self) -> list[PortfolioId]:
        """Get identifiers of every portfolio, in display order."""
        ...


class AssetClassProvider(Protocol):
    """Protocol for asset-class grouping of funds and portfolio targets."""

    def get_asset_class_map(self, portfolio_id: PortfolioId) -> AssetClassMap:
        """Map each fund in the portfolio to its asset class label."""
        ...

    def get_asset_class_targets(self, portfolio_id: PortfolioId) -> AssetClassTargets:
        """Get portfolio-level target percentages by asset class."""
        ...

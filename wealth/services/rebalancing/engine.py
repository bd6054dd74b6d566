"""High-level orchestration for rebalancing plans and alerts."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

import structlog

from wealth.domain import (
    PortfolioAllocation,
    build_buy_sell_plan,
    build_lumpsum_plan,
    build_sip_plan,
    classify_all,
    compute_rebalance_alerts,
    compute_snapshot,
    count_drifted,
    plan_proportional,
    summarize_alerts,
)
from wealth.services.data_providers import DjangoAssetClassProvider, DjangoHoldingsProvider
from wealth.services.providers import (
    AssetClassProvider,
    HoldingsProvider,
    PortfolioHoldings,
    PortfolioId,
)
from wealth.services.rebalancing.dataclasses import (
    AlertReport,
    FundRecommendation,
    RebalancePlan,
)

logger = structlog.get_logger(__name__)


def _setting(name: str, default: str) -> Decimal:
    raw = getattr(settings, name, default)
    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise ImproperlyConfigured(f"{name}={raw!r} is not a number") from e
    if not value.is_finite() or value < 0:
        raise ImproperlyConfigured(f"{name}={raw!r} must be a non-negative number")
    return value


class RebalancingEngine:
    """Loads portfolios through a provider and runs the allocation engine on them."""

    def __init__(
        self,
        holdings_provider: HoldingsProvider | None = None,
        asset_class_provider: AssetClassProvider | None = None,
        sip_adjustment_tolerance: Decimal | None = None,
        high_priority_deviation: Decimal | None = None,
    ) -> None:
        """Initialize engine with its data sources.

        Args:
            holdings_provider: Source of holdings and portfolio metadata
                (a PortfolioCache works here too)
            asset_class_provider: Source of asset-class grouping for alerts
            sip_adjustment_tolerance: Overrides WEALTH_SIP_ADJUSTMENT_TOLERANCE
            high_priority_deviation: Overrides WEALTH_HIGH_PRIORITY_DEVIATION
        """
        self.holdings_provider = holdings_provider or DjangoHoldingsProvider()
        self.asset_class_provider = asset_class_provider or DjangoAssetClassProvider()
        self.sip_adjustment_tolerance = (
            sip_adjustment_tolerance
            if sip_adjustment_tolerance is not None
            else _setting("WEALTH_SIP_ADJUSTMENT_TOLERANCE", "10")
        )
        self.high_priority_deviation = (
            high_priority_deviation
            if high_priority_deviation is not None
            else _setting("WEALTH_HIGH_PRIORITY_DEVIATION", "10")
        )

    def generate_plan(self, portfolio_id: PortfolioId) -> RebalancePlan:
        """Generate the full recommendation set for one portfolio.

        Raises:
            PortfolioNotFoundError: If the provider does not know the portfolio
            InvalidInputError: If stored values are out of range
        """
        logger.info("generating_rebalance_plan", portfolio_id=portfolio_id)

        portfolio = self.holdings_provider.get_portfolio_holdings(portfolio_id)
        plan = self.build_plan(portfolio)

        logger.info(
            "rebalance_plan_generated",
            portfolio_id=portfolio_id,
            fund_count=len(plan.recommendations),
            drifted_count=plan.drifted_count,
            total_buy=float(plan.total_buy_amount),
            total_sell=float(plan.total_sell_amount),
            sip_method=plan.sip_plan.method if plan.sip_plan else None,
        )
        return plan

    def build_plan(self, portfolio: PortfolioHoldings) -> RebalancePlan:
        """Compute a plan from already-loaded holdings (no I/O)."""

        threshold = portfolio.rebalance_threshold
        snapshot = compute_snapshot(portfolio.holdings)
        statuses = classify_all(snapshot, threshold)
        buy_sell = build_buy_sell_plan(snapshot, threshold)

        sip_plan = None
        if portfolio.sip_target > 0:
            sip_plan = build_sip_plan(snapshot, portfolio.sip_target)
            if sip_plan.needs_adjustment(self.sip_adjustment_tolerance):
                logger.info(
                    "sip_adjustment_recommended",
                    portfolio_id=portfolio.portfolio_id,
                    total_gap=float(sip_plan.total_gap),
                )

        lumpsum_plan = None
        target_lumpsum: dict[str, Decimal] = {}
        if portfolio.lumpsum_target > 0:
            lumpsum_plan = build_lumpsum_plan(snapshot, threshold, portfolio.lumpsum_target)
            target_lumpsum = plan_proportional(portfolio.holdings, portfolio.lumpsum_target)
            if not lumpsum_plan.is_conserved():
                logger.warning(
                    "lumpsum_not_conserved",
                    portfolio_id=portfolio.portfolio_id,
                    cash_amount=float(lumpsum_plan.cash_amount),
                    allocated=float(lumpsum_plan.allocated),
                    discrepancy=float(lumpsum_plan.discrepancy),
                )

        recommendations = [
            FundRecommendation(
                fund_id=position.fund_id,
                current_value=position.current_value,
                current_percent=position.current_percent,
                target_percent=position.target_percent,
                target_value=position.target_value,
                status=statuses[position.fund_id],
                buy_sell_amount=buy_sell[position.fund_id],
                ongoing_sip=sip_plan.normal_amounts[position.fund_id] if sip_plan else None,
                rebalance_sip=sip_plan.amounts[position.fund_id] if sip_plan else None,
                target_lumpsum=target_lumpsum.get(position.fund_id) if lumpsum_plan else None,
                rebalance_lumpsum=(
                    lumpsum_plan.amounts[position.fund_id] if lumpsum_plan else None
                ),
            )
            for position in snapshot
        ]

        return RebalancePlan(
            portfolio_id=portfolio.portfolio_id,
            portfolio_name=portfolio.name,
            threshold=threshold,
            snapshot=snapshot,
            recommendations=recommendations,
            sip_plan=sip_plan,
            lumpsum_plan=lumpsum_plan,
            drifted_count=count_drifted(snapshot, threshold),
            generated_at=datetime.now(),
        )

    def get_rebalancing_alerts(
        self, portfolio_ids: Iterable[PortfolioId] | None = None
    ) -> AlertReport:
        """Asset-class alerts for the given portfolios (all when None)."""

        if portfolio_ids is None:
            portfolio_ids = self.holdings_provider.list_portfolio_ids()

        allocations = [self._load_allocation(pid) for pid in portfolio_ids]
        alerts = compute_rebalance_alerts(allocations, self.high_priority_deviation)
        summary = summarize_alerts(alerts, portfolio_count=len(allocations))

        logger.info(
            "rebalancing_alerts_computed",
            portfolio_count=len(allocations),
            alert_count=len(alerts),
        )
        return AlertReport(alerts=alerts, summary=summary, generated_at=datetime.now())

    def _load_allocation(self, portfolio_id: Any) -> PortfolioAllocation:
        portfolio = self.holdings_provider.get_portfolio_holdings(portfolio_id)
        return PortfolioAllocation(
            portfolio_id=portfolio.portfolio_id,
            name=portfolio.name,
            threshold=portfolio.rebalance_threshold,
            holdings=portfolio.holdings,
            asset_class_by_fund=self.asset_class_provider.get_asset_class_map(portfolio_id),
            asset_class_targets=self.asset_class_provider.get_asset_class_targets(portfolio_id),
        )

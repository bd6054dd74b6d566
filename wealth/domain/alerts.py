"""Portfolio-level rebalancing alerts at asset-class granularity.

Same deviation/threshold rule as the per-fund classifier, applied to
holding values grouped by asset class.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any

from wealth.domain.holdings import FundHolding
from wealth.domain.validation import (
    HUNDRED,
    ZERO,
    to_decimal,
    validate_percent,
    validate_threshold,
)

DEFAULT_ASSET_CLASS = "Other"
HIGH_PRIORITY_DEVIATION = Decimal("10")


class AlertAction(StrEnum):
    REDUCE = "REDUCE"
    INCREASE = "INCREASE"


class AlertPriority(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


@dataclass(frozen=True)
class PortfolioAllocation:
    """Everything the alert scan needs to know about one portfolio.

    Attributes:
        portfolio_id: Opaque portfolio identifier
        name: Display name carried onto each alert
        threshold: Rebalance threshold in percentage points
        holdings: Fund holdings (only current_value is used here)
        asset_class_by_fund: fund_id -> asset class label
        asset_class_targets: asset class label -> target percent
    """

    portfolio_id: Any
    name: str
    threshold: Decimal
    holdings: tuple[FundHolding, ...] = ()
    asset_class_by_fund: Mapping[str, str] = field(default_factory=dict)
    asset_class_targets: Mapping[str, Decimal] = field(default_factory=dict)

    @property
    def total_value(self) -> Decimal:
        return sum((h.current_value for h in self.holdings), ZERO)


@dataclass(frozen=True)
class RebalanceAlert:
    portfolio_id: Any
    portfolio_name: str
    asset_class: str
    target_percent: Decimal
    current_percent: Decimal
    deviation: Decimal
    deviation_amount: Decimal
    action: AlertAction
    priority: AlertPriority

    @property
    def deviation_abs(self) -> Decimal:
        return abs(self.deviation)


def value_by_asset_class(
    holdings: Iterable[FundHolding], asset_class_by_fund: Mapping[str, str]
) -> dict[str, Decimal]:
    """Aggregate holding values by asset class; unlabelled funds go to "Other"."""

    result: dict[str, Decimal] = {}
    for holding in holdings:
        label = asset_class_by_fund.get(holding.fund_id) or DEFAULT_ASSET_CLASS
        result[label] = result.get(label, ZERO) + holding.current_value
    return result


def portfolio_alerts(
    allocation: PortfolioAllocation,
    high_priority_deviation: Decimal = HIGH_PRIORITY_DEVIATION,
) -> list[RebalanceAlert]:
    """Alerts for a single portfolio, in target order.

    Portfolios with no asset-class targets or no value produce nothing.
    """

    threshold = validate_threshold(allocation.threshold)
    if not allocation.asset_class_targets:
        return []

    total = allocation.total_value
    if total == ZERO:
        return []

    current_by_class = value_by_asset_class(allocation.holdings, allocation.asset_class_by_fund)

    alerts = []
    for asset_class, raw_target in allocation.asset_class_targets.items():
        target_pct = validate_percent(raw_target, f"target for {asset_class}")
        current_pct = current_by_class.get(asset_class, ZERO) / total * HUNDRED
        deviation = current_pct - target_pct
        deviation_abs = abs(deviation)

        if deviation_abs <= threshold:
            continue

        alerts.append(
            RebalanceAlert(
                portfolio_id=allocation.portfolio_id,
                portfolio_name=allocation.name,
                asset_class=asset_class,
                target_percent=target_pct,
                current_percent=current_pct,
                deviation=deviation,
                deviation_amount=deviation_abs / HUNDRED * total,
                action=AlertAction.REDUCE if deviation > ZERO else AlertAction.INCREASE,
                priority=(
                    AlertPriority.HIGH
                    if deviation_abs > high_priority_deviation
                    else AlertPriority.MEDIUM
                ),
            )
        )
    return alerts


def compute_rebalance_alerts(
    portfolios: Iterable[PortfolioAllocation],
    high_priority_deviation: Any = HIGH_PRIORITY_DEVIATION,
) -> list[RebalanceAlert]:
    """Alerts across all portfolios, largest absolute deviation first."""

    high_priority_deviation = to_decimal(high_priority_deviation, "high_priority_deviation")
    alerts: list[RebalanceAlert] = []
    for allocation in portfolios:
        alerts.extend(portfolio_alerts(allocation, high_priority_deviation))

    alerts.sort(key=lambda a: a.deviation_abs, reverse=True)
    return alerts


def summarize_alerts(alerts: list[RebalanceAlert], portfolio_count: int | None = None) -> str:
    """One-line dashboard summary; ``portfolio_count=0`` means nothing was scanned."""

    if portfolio_count == 0:
        return "No portfolios to analyze"
    if alerts:
        return f"{len(alerts)} rebalancing action(s) needed"
    return "All portfolios are balanced"

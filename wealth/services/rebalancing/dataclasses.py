"""Data structures for rebalancing plans and alert reports."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

import pandas as pd

from wealth.domain import (
    AllocationStatus,
    LumpsumPlan,
    PortfolioSnapshot,
    RebalanceAlert,
    SipPlan,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class FundRecommendation:
    """Every recommendation for one fund, side by side.

    Attributes:
        fund_id: Fund identifier (scheme code)
        current_value: Present market value
        current_percent: Share of portfolio value (0-100)
        target_percent: Planned share (0 when the fund has no target)
        target_value: target_percent of the current portfolio total
        status: Balanced / Overweight / Underweight against the threshold
        buy_sell_amount: Signed rebalance amount (positive = buy)
        ongoing_sip: Target-percent split of the SIP (None without a SIP target)
        rebalance_sip: Gap-proportional SIP (None without a SIP target)
        target_lumpsum: Target-percent split of the lump sum (None without one)
        rebalance_lumpsum: Threshold-gated lump sum (None without one)
    """

    fund_id: str
    current_value: Decimal
    current_percent: Decimal
    target_percent: Decimal
    target_value: Decimal
    status: AllocationStatus
    buy_sell_amount: Decimal
    ongoing_sip: Decimal | None = None
    rebalance_sip: Decimal | None = None
    target_lumpsum: Decimal | None = None
    rebalance_lumpsum: Decimal | None = None

    @property
    def deviation(self) -> Decimal:
        return self.current_percent - self.target_percent


@dataclass(frozen=True)
class RebalancePlan:
    """Complete recommendation set for one portfolio.

    Attributes:
        portfolio_id: The portfolio being analysed
        portfolio_name: Display name
        threshold: Rebalance threshold used (percentage points)
        snapshot: Allocation snapshot the plan was computed from
        recommendations: One row per fund, in holdings order
        sip_plan: Smart SIP plan, None when the portfolio has no SIP target
        lumpsum_plan: Smart lump-sum plan, None when there is no lump-sum target
        drifted_count: Funds outside their rebalance band
        generated_at: When this plan was calculated
    """

    portfolio_id: Any
    portfolio_name: str
    threshold: Decimal
    snapshot: PortfolioSnapshot
    recommendations: list[FundRecommendation] = field(default_factory=list)
    sip_plan: SipPlan | None = None
    lumpsum_plan: LumpsumPlan | None = None
    drifted_count: int = 0
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def total_value(self) -> Decimal:
        return self.snapshot.total_current_value

    @property
    def needs_rebalancing(self) -> bool:
        return self.drifted_count > 0

    @property
    def buy_sell(self) -> dict[str, Decimal]:
        return {r.fund_id: r.buy_sell_amount for r in self.recommendations}

    @property
    def total_buy_amount(self) -> Decimal:
        return sum((r.buy_sell_amount for r in self.recommendations if r.buy_sell_amount > 0), ZERO)

    @property
    def total_sell_amount(self) -> Decimal:
        """Sum of sell amounts, as a positive number."""
        return -sum((r.buy_sell_amount for r in self.recommendations if r.buy_sell_amount < 0), ZERO)

    @property
    def net_amount(self) -> Decimal:
        """Net buy/sell; zero when money only moves between funds."""
        return self.total_buy_amount - self.total_sell_amount

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert the per-fund recommendations to a DataFrame for display.

        Returns:
            DataFrame indexed by Fund with float columns; SIP and lump-sum
            columns are present only when the corresponding plan exists.
        """
        columns = [
            "Current_Value",
            "Current_Pct",
            "Target_Pct",
            "Target_Value",
            "Status",
            "Buy_Sell",
        ]
        if self.sip_plan is not None:
            columns += ["Ongoing_SIP", "Rebalance_SIP"]
        if self.lumpsum_plan is not None:
            columns += ["Target_Lumpsum", "Rebalance_Lumpsum"]

        rows = []
        for rec in self.recommendations:
            row: dict[str, Any] = {
                "Fund": rec.fund_id,
                "Current_Value": float(rec.current_value),
                "Current_Pct": float(rec.current_percent),
                "Target_Pct": float(rec.target_percent),
                "Target_Value": float(rec.target_value),
                "Status": str(rec.status),
                "Buy_Sell": float(rec.buy_sell_amount),
            }
            if self.sip_plan is not None:
                row["Ongoing_SIP"] = float(rec.ongoing_sip or ZERO)
                row["Rebalance_SIP"] = float(rec.rebalance_sip or ZERO)
            if self.lumpsum_plan is not None:
                row["Target_Lumpsum"] = float(rec.target_lumpsum or ZERO)
                row["Rebalance_Lumpsum"] = float(rec.rebalance_lumpsum or ZERO)
            rows.append(row)

        if not rows:
            return pd.DataFrame(columns=columns, index=pd.Index([], name="Fund"))

        return pd.DataFrame(rows).set_index("Fund")[columns]


@dataclass(frozen=True)
class AlertReport:
    """Asset-class rebalancing alerts across portfolios."""

    alerts: list[RebalanceAlert] = field(default_factory=list)
    summary: str = ""
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def high_priority(self) -> list[RebalanceAlert]:
        return [a for a in self.alerts if a.priority == "HIGH"]

from __future__ import annotations

from .alerts import (
    AlertAction,
    AlertPriority,
    PortfolioAllocation,
    RebalanceAlert,
    compute_rebalance_alerts,
    summarize_alerts,
)
from .classification import AllocationStatus, classify, classify_all, count_drifted
from .holdings import FundHolding, FundPosition, PortfolioSnapshot, compute_snapshot
from .recommendations import (
    LumpsumPlan,
    SipPlan,
    build_buy_sell_plan,
    build_lumpsum_plan,
    build_sip_plan,
    plan_buy_sell,
    plan_lumpsum,
    plan_proportional,
    plan_sip,
    total_gap,
)

__all__ = [
    "AlertAction",
    "AlertPriority",
    "AllocationStatus",
    "FundHolding",
    "FundPosition",
    "LumpsumPlan",
    "PortfolioAllocation",
    "PortfolioSnapshot",
    "RebalanceAlert",
    "SipPlan",
    "build_buy_sell_plan",
    "build_lumpsum_plan",
    "build_sip_plan",
    "classify",
    "classify_all",
    "compute_rebalance_alerts",
    "compute_snapshot",
    "count_drifted",
    "plan_buy_sell",
    "plan_lumpsum",
    "plan_proportional",
    "plan_sip",
    "summarize_alerts",
    "total_gap",
]

"""Rebalancing plan generation for family portfolios.

This module runs the allocation engine over portfolios loaded through a
holdings provider and packages the results for presentation layers.

Usage:
    from wealth.services.rebalancing import RebalancingEngine

    engine = RebalancingEngine()
    plan = engine.generate_plan(portfolio.id)

    for rec in plan.recommendations:
        print(f"{rec.fund_id} {rec.status} {rec.buy_sell_amount}")
"""

from wealth.services.rebalancing.dataclasses import (
    AlertReport,
    FundRecommendation,
    RebalancePlan,
)
from wealth.services.rebalancing.engine import RebalancingEngine

__all__ = ["AlertReport", "FundRecommendation", "RebalancePlan", "RebalancingEngine"]

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Any

from wealth.domain.holdings import FundHolding, PortfolioSnapshot
from wealth.domain.validation import ZERO, validate_threshold


class AllocationStatus(StrEnum):
    """Where a fund sits relative to its target band."""

    BALANCED = "Balanced"
    OVERWEIGHT = "Overweight"
    UNDERWEIGHT = "Underweight"

    @property
    def is_actionable(self) -> bool:
        return self is not AllocationStatus.BALANCED


def exceeds_threshold(current_percent: Decimal, target_percent: Decimal, threshold: Decimal) -> bool:
    """True when |current - target| is strictly greater than the threshold."""

    return abs(current_percent - target_percent) > threshold


def classify_deviation(
    current_percent: Decimal,
    target_percent: Decimal | None,
    threshold: Decimal,
) -> AllocationStatus:
    """Compare current vs. target percent against the rebalance threshold.

    A fund that holds value but has no target is always overweight: the
    whole position is an exit candidate. A deviation equal to the threshold
    is balanced.
    """

    if (target_percent is None or target_percent == ZERO) and current_percent > ZERO:
        return AllocationStatus.OVERWEIGHT

    deviation = current_percent - (target_percent or ZERO)
    if abs(deviation) <= threshold:
        return AllocationStatus.BALANCED
    if deviation > ZERO:
        return AllocationStatus.OVERWEIGHT
    return AllocationStatus.UNDERWEIGHT


def classify(holding: FundHolding, snapshot: PortfolioSnapshot, threshold: Any) -> AllocationStatus:
    """Classify one holding within the snapshot it belongs to."""

    threshold = validate_threshold(threshold)
    position = snapshot.position_for(holding.fund_id)
    current_pct = position.current_percent if position is not None else ZERO
    return classify_deviation(current_pct, holding.target_percent, threshold)


def classify_all(snapshot: PortfolioSnapshot, threshold: Any) -> dict[str, AllocationStatus]:
    threshold = validate_threshold(threshold)
    return {
        p.fund_id: classify_deviation(p.current_percent, p.holding.target_percent, threshold)
        for p in snapshot
    }


def count_drifted(snapshot: PortfolioSnapshot, threshold: Any) -> int:
    """Number of funds outside their rebalance band."""

    threshold = validate_threshold(threshold)
    return sum(
        1
        for p in snapshot
        if classify_deviation(p.current_percent, p.holding.target_percent, threshold).is_actionable
    )

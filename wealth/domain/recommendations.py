"""Recommendation generators: buy/sell, SIP and lump-sum plans.

All three work off the same PortfolioSnapshot and are independent of each
other. Amounts are monetary Decimals keyed by fund id.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal

from wealth.domain.classification import classify_deviation, exceeds_threshold
from wealth.domain.holdings import FundHolding, PortfolioSnapshot, compute_snapshot
from wealth.domain.validation import (
    HUNDRED,
    ZERO,
    validate_cash_amount,
    validate_threshold,
)

SIP_ADJUSTMENT_TOLERANCE = Decimal("10")
"""Smart and normal SIP amounts closer than this are treated as unchanged."""

LUMPSUM_TOLERANCE = Decimal("1")
"""Largest |cash - allocated| still reported as a conserved lump-sum plan."""


@dataclass(frozen=True)
class SipPlan:
    """Gap-proportional SIP distribution alongside the plain target split."""

    cash_amount: Decimal
    amounts: dict[str, Decimal] = field(default_factory=dict)
    normal_amounts: dict[str, Decimal] = field(default_factory=dict)
    total_gap: Decimal = ZERO
    method: Literal["gap", "proportional"] = "proportional"

    @property
    def total(self) -> Decimal:
        return sum(self.amounts.values(), ZERO)

    def needs_adjustment(self, tolerance: Decimal = SIP_ADJUSTMENT_TOLERANCE) -> bool:
        """True when any fund's smart SIP moves away from its normal SIP."""

        return any(
            abs(amount - self.normal_amounts.get(fund_id, ZERO)) > tolerance
            for fund_id, amount in self.amounts.items()
        )


@dataclass(frozen=True)
class LumpsumPlan:
    """Threshold-gated lump-sum distribution.

    The per-fund gate means ``allocated`` can differ from ``cash_amount``
    when some funds use the smart formula and others the simple one. The
    difference is reported, not redistributed.
    """

    cash_amount: Decimal
    amounts: dict[str, Decimal] = field(default_factory=dict)
    smart_fund_ids: frozenset[str] = frozenset()

    @property
    def allocated(self) -> Decimal:
        return sum(self.amounts.values(), ZERO)

    @property
    def discrepancy(self) -> Decimal:
        """Cash left unallocated (positive) or over-allocated (negative)."""

        return self.cash_amount - self.allocated

    def is_conserved(self, tolerance: Decimal = LUMPSUM_TOLERANCE) -> bool:
        return abs(self.discrepancy) <= tolerance


def total_gap(snapshot: PortfolioSnapshot) -> Decimal:
    """Sum of positive (underweight) gaps across the portfolio."""

    return sum((p.gap for p in snapshot), ZERO)


def plan_proportional(holdings: Iterable[FundHolding], cash_amount: Any) -> dict[str, Decimal]:
    """Split new cash by target percent (the "ongoing SIP" / "target lumpsum" column)."""

    cash = validate_cash_amount(cash_amount)
    return {h.fund_id: h.effective_target_percent / HUNDRED * cash for h in holdings}


def plan_buy_sell(holdings: Iterable[FundHolding], threshold: Any) -> dict[str, Decimal]:
    """Rebalance-to-target amounts; positive = buy, negative = sell.

    Funds inside their band get 0. Total portfolio value is held constant.
    """

    return build_buy_sell_plan(compute_snapshot(holdings), threshold)


def build_buy_sell_plan(snapshot: PortfolioSnapshot, threshold: Any) -> dict[str, Decimal]:
    threshold = validate_threshold(threshold)
    amounts: dict[str, Decimal] = {}
    for position in snapshot:
        status = classify_deviation(
            position.current_percent, position.holding.target_percent, threshold
        )
        if status.is_actionable:
            amounts[position.fund_id] = position.target_value - position.current_value
        else:
            amounts[position.fund_id] = ZERO
    return amounts


def build_sip_plan(snapshot: PortfolioSnapshot, cash_amount: Any) -> SipPlan:
    """Distribute SIP cash to close underweight gaps first.

    With any positive gap, each fund gets ``gap / total_gap * cash`` and
    funds without a gap get exactly zero. With no gap at all the plan falls
    back to the target-percent split.
    """

    cash = validate_cash_amount(cash_amount)
    normal = {p.fund_id: p.target_percent / HUNDRED * cash for p in snapshot}
    gap_total = total_gap(snapshot)

    if gap_total > ZERO:
        amounts = {p.fund_id: p.gap / gap_total * cash for p in snapshot}
        return SipPlan(
            cash_amount=cash,
            amounts=amounts,
            normal_amounts=normal,
            total_gap=gap_total,
            method="gap",
        )

    return SipPlan(
        cash_amount=cash,
        amounts=dict(normal),
        normal_amounts=normal,
        total_gap=ZERO,
        method="proportional",
    )


def plan_sip(holdings: Iterable[FundHolding], threshold: Any, cash_amount: Any) -> dict[str, Decimal]:
    """Gap-proportional SIP amounts per fund.

    ``threshold`` is validated for a uniform call signature; the SIP split
    itself does not depend on it.
    """

    validate_threshold(threshold)
    return build_sip_plan(compute_snapshot(holdings), cash_amount).amounts


def build_lumpsum_plan(snapshot: PortfolioSnapshot, threshold: Any, cash_amount: Any) -> LumpsumPlan:
    """Distribute a lump sum, gating the smart formula per fund.

    A fund outside its band gets what it needs to reach its target share of
    the post-injection total, floored at zero. A fund inside its band gets
    its plain target share of the cash.
    """

    threshold = validate_threshold(threshold)
    cash = validate_cash_amount(cash_amount)
    post_total = snapshot.total_current_value + cash

    amounts: dict[str, Decimal] = {}
    smart: set[str] = set()
    for position in snapshot:
        target_pct = position.target_percent
        if exceeds_threshold(position.current_percent, target_pct, threshold):
            amounts[position.fund_id] = max(
                ZERO, target_pct / HUNDRED * post_total - position.current_value
            )
            smart.add(position.fund_id)
        else:
            amounts[position.fund_id] = target_pct / HUNDRED * cash

    return LumpsumPlan(cash_amount=cash, amounts=amounts, smart_fund_ids=frozenset(smart))


def plan_lumpsum(
    holdings: Iterable[FundHolding], threshold: Any, cash_amount: Any
) -> dict[str, Decimal]:
    return build_lumpsum_plan(compute_snapshot(holdings), threshold, cash_amount).amounts

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal

from wealth.domain.validation import (
    HUNDRED,
    ZERO,
    validate_non_negative,
    validate_percent,
)


@dataclass(frozen=True)
class FundHolding:
    """One fund position inside one portfolio.

    Percentages are expressed on a 0-100 scale (not 0-1). A ``target_percent``
    of ``None`` or zero means the fund is not part of the allocation plan.
    """

    fund_id: str
    current_value: Decimal
    target_percent: Decimal | None = None

    def __post_init__(self) -> None:
        """Coerce numeric fields to Decimal and validate their ranges."""
        object.__setattr__(
            self, "current_value", validate_non_negative(self.current_value, "current_value")
        )
        if self.target_percent is not None:
            object.__setattr__(
                self, "target_percent", validate_percent(self.target_percent, "target_percent")
            )

    @property
    def has_target(self) -> bool:
        return self.target_percent is not None and self.target_percent > ZERO

    @property
    def effective_target_percent(self) -> Decimal:
        """Target percent with an absent target read as zero."""

        return self.target_percent if self.target_percent is not None else ZERO

    def target_value_for(self, total_value: Decimal) -> Decimal:
        """Return the target amount for a given portfolio total."""

        return self.effective_target_percent / HUNDRED * total_value


@dataclass(frozen=True)
class FundPosition:
    """A holding together with the figures derived from its portfolio total."""

    holding: FundHolding
    current_percent: Decimal
    target_value: Decimal

    @property
    def fund_id(self) -> str:
        return self.holding.fund_id

    @property
    def current_value(self) -> Decimal:
        return self.holding.current_value

    @property
    def target_percent(self) -> Decimal:
        return self.holding.effective_target_percent

    @property
    def deviation(self) -> Decimal:
        """Signed deviation in percentage points (current - target)."""

        return self.current_percent - self.target_percent

    @property
    def gap(self) -> Decimal:
        """Shortfall below target value; zero for overweight or balanced funds."""

        return max(ZERO, self.target_value - self.current_value)


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Point-in-time allocation view of a portfolio, derived from its holdings."""

    total_current_value: Decimal
    positions: tuple[FundPosition, ...] = ()

    def __iter__(self) -> Iterator[FundPosition]:
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def is_empty(self) -> bool:
        return self.total_current_value == ZERO

    @property
    def total_target_percent(self) -> Decimal:
        return sum((p.target_percent for p in self.positions), ZERO)

    def position_for(self, fund_id: str) -> FundPosition | None:
        """Find a position by fund id (first match when ids repeat)."""

        for position in self.positions:
            if position.fund_id == fund_id:
                return position
        return None


def compute_snapshot(holdings: Iterable[FundHolding]) -> PortfolioSnapshot:
    """Build a PortfolioSnapshot from an ordered list of holdings.

    Duplicate fund ids are kept as separate positions. When the total value
    is zero every ``current_percent`` and ``target_value`` is zero.
    """

    holdings = tuple(holdings)
    total = sum((h.current_value for h in holdings), ZERO)

    positions = []
    for holding in holdings:
        if total == ZERO:
            current_pct = ZERO
        else:
            current_pct = holding.current_value / total * HUNDRED
        positions.append(
            FundPosition(
                holding=holding,
                current_percent=current_pct,
                target_value=holding.target_value_for(total),
            )
        )

    return PortfolioSnapshot(total_current_value=total, positions=tuple(positions))

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.db import transaction

import structlog

from wealth.domain.validation import validate_percent
from wealth.exceptions import AllocationError, InvalidInputError

if TYPE_CHECKING:
    from wealth.models import Portfolio
    from wealth.services.cache import PortfolioCache

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AllocationChangeSummary:
    updated: int = 0
    added: int = 0
    removed: int = 0

    @property
    def message(self) -> str:
        parts = []
        if self.updated:
            parts.append(f"{self.updated} fund(s) updated")
        if self.added:
            parts.append(f"{self.added} fund(s) added")
        if self.removed:
            parts.append(f"{self.removed} fund(s) removed")
        if not parts:
            return "Allocation saved!"
        return f"Allocation saved! {', '.join(parts)}."


class AllocationPlanService:
    """Applies a new fund-level target allocation to a portfolio."""

    TOTAL_ALLOCATION_PCT = Decimal("100.00")

    ALLOCATION_TOLERANCE = Decimal("0.001")
    """Allocations within this tolerance above 100% are still accepted."""

    TARGET_QUANTUM = Decimal("0.01")
    """Targets are stored with two decimal places; finer values are rejected."""

    def __init__(self, cache: PortfolioCache | None = None) -> None:
        self._cache = cache

    def validate_targets(self, targets: dict[str, Any]) -> dict[str, Decimal]:
        """
        Validate per-fund targets and their total.

        Returns:
            Dict of scheme_code -> target percent as Decimal

        Raises:
            AllocationError: If a target is outside 0-100, has more than two
                decimal places, or the total exceeds 100%
        """
        validated: dict[str, Decimal] = {}
        for scheme_code, pct in targets.items():
            try:
                validated[scheme_code] = validate_percent(pct, f"target for {scheme_code}")
            except InvalidInputError as e:
                raise AllocationError(str(e)) from e
            if validated[scheme_code] != validated[scheme_code].quantize(self.TARGET_QUANTUM):
                raise AllocationError(
                    f"target for {scheme_code} has more than 2 decimal places, got {pct}"
                )

        total = sum(validated.values(), Decimal("0"))
        if total > self.TOTAL_ALLOCATION_PCT + self.ALLOCATION_TOLERANCE:
            raise AllocationError(f"Fund allocations sum to {total}%, which exceeds 100%")
        return validated

    def save_allocation(self, portfolio: Portfolio, targets: dict[str, Any]) -> AllocationChangeSummary:
        """
        Save fund targets for a portfolio.

        - Funds already held get their target updated
        - New funds are added with a current value of 0
        - Funds left out are removed when their value is 0; otherwise their
          target is cleared and they stay as exit candidates

        Args:
            portfolio: Portfolio to update
            targets: Dict of scheme_code -> target_percent

        Raises:
            AllocationError: If targets are invalid or name an unknown fund
        """
        from wealth.models import Fund, FundHolding

        validated = self.validate_targets(targets)

        funds = {f.scheme_code: f for f in Fund.objects.filter(scheme_code__in=validated)}
        unknown = sorted(set(validated) - set(funds))
        if unknown:
            raise AllocationError(f"Unknown fund scheme code(s): {', '.join(unknown)}")

        updated = added = removed = 0

        with transaction.atomic():
            existing = {h.fund.scheme_code: h for h in FundHolding.objects.for_portfolio(portfolio.pk)}

            for scheme_code, holding in existing.items():
                if scheme_code in validated:
                    holding.target_percent = validated[scheme_code]
                    holding.save(update_fields=["target_percent"])
                    updated += 1
                elif holding.current_value == 0:
                    holding.delete()
                    removed += 1
                elif holding.target_percent is not None:
                    holding.target_percent = None
                    holding.save(update_fields=["target_percent"])
                    updated += 1

            for scheme_code, pct in validated.items():
                if scheme_code not in existing:
                    FundHolding.objects.create(
                        portfolio=portfolio,
                        fund=funds[scheme_code],
                        current_value=Decimal("0"),
                        target_percent=pct,
                    )
                    added += 1

        if self._cache is not None:
            self._cache.invalidate(portfolio.pk)

        summary = AllocationChangeSummary(updated=updated, added=added, removed=removed)
        logger.info(
            "allocation_saved",
            portfolio_id=portfolio.pk,
            updated=updated,
            added=added,
            removed=removed,
        )
        return summary

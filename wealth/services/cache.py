"""Read-through cache for portfolio lookups.

The cache is an explicit object owned by the caller; there is no
module-level state. Writers invalidate the portfolios they touch.
"""

from __future__ import annotations

import threading

import structlog

from wealth.services.providers import HoldingsProvider, PortfolioHoldings, PortfolioId

logger = structlog.get_logger(__name__)


class PortfolioCache:
    """Wraps a HoldingsProvider and memoizes its answers until invalidated.

    Satisfies the HoldingsProvider protocol itself, so it can be handed to
    RebalancingEngine in place of the provider it wraps.

    Provider calls run outside the lock. Every ``invalidate()`` bumps a
    generation counter, and a fetch that started before an invalidation
    returns its result without storing it.
    """

    def __init__(self, provider: HoldingsProvider) -> None:
        self._provider = provider
        self._holdings: dict[PortfolioId, PortfolioHoldings] = {}
        self._portfolio_ids: list[PortfolioId] | None = None
        self._generation = 0
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_portfolio_holdings(self, portfolio_id: PortfolioId) -> PortfolioHoldings:
        with self._lock:
            cached = self._holdings.get(portfolio_id)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1
            generation = self._generation

        holdings = self._provider.get_portfolio_holdings(portfolio_id)

        with self._lock:
            if generation == self._generation:
                self._holdings[portfolio_id] = holdings
        return holdings

    def list_portfolio_ids(self) -> list[PortfolioId]:
        with self._lock:
            if self._portfolio_ids is not None:
                self.hits += 1
                return list(self._portfolio_ids)
            self.misses += 1
            generation = self._generation

        portfolio_ids = list(self._provider.list_portfolio_ids())

        with self._lock:
            if generation == self._generation:
                self._portfolio_ids = portfolio_ids
        return list(portfolio_ids)

    def invalidate(self, portfolio_id: PortfolioId | None = None) -> None:
        """Drop one portfolio (and the id list), or everything when no id is given."""

        with self._lock:
            self._generation += 1
            if portfolio_id is None:
                self._holdings.clear()
            else:
                self._holdings.pop(portfolio_id, None)
            self._portfolio_ids = None

        logger.debug("portfolio_cache_invalidated", portfolio_id=portfolio_id)

    def __contains__(self, portfolio_id: PortfolioId) -> bool:
        with self._lock:
            return portfolio_id in self._holdings

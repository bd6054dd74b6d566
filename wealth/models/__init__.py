"""
Wealth Django Models

Organized by domain:
- assets.py: Asset classes and mutual fund schemes
- portfolio.py: Portfolio container, fund holdings and asset-class targets
"""

from __future__ import annotations

# Import in dependency order (models with no FKs first)
from .assets import AssetClass, Fund
from .portfolio import AssetClassTarget, FundHolding, Portfolio

# Django needs __all__ to register models properly
__all__ = [
    # Assets
    "AssetClass",
    "Fund",
    # Portfolio
    "AssetClassTarget",
    "FundHolding",
    "Portfolio",
]

"""
Root-level pytest fixtures for the wealth test suite.

Fixture Hierarchy:
- test_user: Standard test user
- equity / debt: Asset classes
- equity_fund / debt_fund / gold_fund: Fund schemes
- test_portfolio: Empty portfolio owned by test_user
- balanced_portfolio: 60/40 equity/debt portfolio with holdings and asset-class targets
- make_holdings: Builder for engine FundHolding tuples
"""

from decimal import Decimal

from django.contrib.auth import get_user_model

import pytest

from wealth.domain import FundHolding
from wealth.models import AssetClass, AssetClassTarget, Fund, Portfolio
from wealth.models import FundHolding as FundHoldingModel

User = get_user_model()


# ============================================================================
# USER FIXTURES
# ============================================================================


@pytest.fixture
def test_user(db):
    """
    Standard test user - reusable across all tests.

    Username: testuser
    Password: password
    """
    return User.objects.create_user(username="testuser", password="password")


# ============================================================================
# ASSET AND FUND FIXTURES
# ============================================================================


@pytest.fixture
def equity(db) -> AssetClass:
    return AssetClass.objects.create(name="Equity")


@pytest.fixture
def debt(db) -> AssetClass:
    return AssetClass.objects.create(name="Debt")


@pytest.fixture
def equity_fund(equity) -> Fund:
    return Fund.objects.create(scheme_code="120503", name="Nifty 50 Index Fund", asset_class=equity)


@pytest.fixture
def debt_fund(debt) -> Fund:
    return Fund.objects.create(scheme_code="119551", name="Short Duration Fund", asset_class=debt)


@pytest.fixture
def gold_fund(db) -> Fund:
    """Fund without an asset class label."""
    return Fund.objects.create(scheme_code="111954", name="Gold ETF Fund of Fund")


# ============================================================================
# PORTFOLIO FIXTURES
# ============================================================================


@pytest.fixture
def test_portfolio(test_user) -> Portfolio:
    return Portfolio.objects.create(user=test_user, name="Family Core")


@pytest.fixture
def balanced_portfolio(test_portfolio, equity, debt, equity_fund, debt_fund) -> Portfolio:
    """
    Portfolio holding 8000 equity / 2000 debt against a 60/40 plan.

    Equity sits at 80% (20 points over), debt at 20% (20 points under),
    so both funds and both asset classes are outside a 5 point band.
    """
    FundHoldingModel.objects.create(
        portfolio=test_portfolio,
        fund=equity_fund,
        current_value=Decimal("8000.00"),
        target_percent=Decimal("60.00"),
    )
    FundHoldingModel.objects.create(
        portfolio=test_portfolio,
        fund=debt_fund,
        current_value=Decimal("2000.00"),
        target_percent=Decimal("40.00"),
    )
    AssetClassTarget.objects.create(
        portfolio=test_portfolio, asset_class=equity, target_percent=Decimal("60.00")
    )
    AssetClassTarget.objects.create(
        portfolio=test_portfolio, asset_class=debt, target_percent=Decimal("40.00")
    )
    return test_portfolio


# ============================================================================
# ENGINE INPUT HELPERS
# ============================================================================


@pytest.fixture
def make_holdings():
    """
    Build engine holdings from ``(fund_id, current_value, target_percent)`` rows.

    Example:
        holdings = make_holdings(("A", "6000", "50"), ("B", "4000", None))
    """

    def _make(*rows) -> tuple[FundHolding, ...]:
        return tuple(
            FundHolding(
                fund_id=fund_id,
                current_value=Decimal(str(value)),
                target_percent=None if target is None else Decimal(str(target)),
            )
            for fund_id, value, target in rows
        )

    return _make

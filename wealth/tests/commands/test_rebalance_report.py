from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError

import pytest

from wealth.models import FundHolding
from wealth.tests.factories import AssetClassTargetFactory, FundFactory, PortfolioFactory


def _run(*args: str) -> str:
    out = StringIO()
    call_command("rebalance_report", *args, stdout=out)
    return out.getvalue()


@pytest.mark.commands
@pytest.mark.integration
@pytest.mark.django_db
class TestRebalanceReportCommand:
    def test_requires_an_option(self) -> None:
        with pytest.raises(CommandError, match="--portfolio"):
            _run()

    def test_unknown_portfolio(self) -> None:
        with pytest.raises(CommandError, match="Portfolio 9999 not found"):
            _run("--portfolio", "9999")

    def test_plan_output(self, balanced_portfolio) -> None:
        output = _run("--portfolio", str(balanced_portfolio.pk))

        assert "Family Core: total 10000.00, threshold 5.00%, 2 fund(s) drifted" in output
        assert "120503" in output
        assert "Overweight" in output
        assert "Ongoing_SIP" not in output

    def test_plan_output_for_empty_portfolio(self, test_portfolio) -> None:
        output = _run("--portfolio", str(test_portfolio.pk))
        assert "No holdings" in output

    def test_plan_warns_on_unconserved_lumpsum(self, test_portfolio, equity_fund, debt_fund, gold_fund) -> None:
        test_portfolio.lumpsum_target = Decimal("1000")
        test_portfolio.save()
        for fund, value, target in (
            (equity_fund, "620", "50"),
            (debt_fund, "230", "25"),
            (gold_fund, "150", "25"),
        ):
            FundHolding.objects.create(
                portfolio=test_portfolio,
                fund=fund,
                current_value=Decimal(value),
                target_percent=Decimal(target),
            )

        output = _run("--portfolio", str(test_portfolio.pk))

        assert "Rebalance_Lumpsum" in output
        assert "Smart lumpsum allocates 980.00 of 1000.00" in output

    def test_alerts_output(self, balanced_portfolio) -> None:
        output = _run("--alerts")

        assert "Family Core | Equity | target 60.00% | current 80.00% | REDUCE 2000.00 | HIGH" in output
        assert "Family Core | Debt | target 40.00% | current 20.00% | INCREASE 2000.00 | HIGH" in output
        assert "2 rebalancing action(s) needed" in output

    def test_alerts_when_balanced(self, test_portfolio) -> None:
        assert "All portfolios are balanced" in _run("--alerts")

    def test_alerts_without_portfolios(self) -> None:
        assert "No portfolios to analyze" in _run("--alerts")

    def test_user_scope_hides_other_members_portfolios(self, balanced_portfolio) -> None:
        other = PortfolioFactory(name="Kids")

        with pytest.raises(CommandError, match=f"Portfolio {other.pk} not found"):
            _run("--portfolio", str(other.pk), "--user", "testuser")

    def test_user_scope_alerts(self, balanced_portfolio) -> None:
        other = PortfolioFactory(name="Kids")
        AssetClassTargetFactory(portfolio=other, asset_class__name="Gold", target_percent=Decimal("100"))
        FundHolding.objects.create(
            portfolio=other,
            fund=FundFactory(asset_class=None),
            current_value=Decimal("100"),
            target_percent=Decimal("100"),
        )

        output = _run("--alerts", "--user", "testuser")

        assert "Kids" not in output
        assert "2 rebalancing action(s) needed" in output

    def test_unknown_user(self) -> None:
        with pytest.raises(CommandError, match="User 'nobody' not found"):
            _run("--alerts", "--user", "nobody")

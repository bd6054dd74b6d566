"""Tests for RebalancingEngine plan generation and alert reporting."""

from decimal import Decimal
from unittest.mock import patch

from django.core.exceptions import ImproperlyConfigured

import pytest

from wealth.domain import AllocationStatus
from wealth.exceptions import PortfolioNotFoundError
from wealth.services.cache import PortfolioCache
from wealth.services.providers import PortfolioHoldings
from wealth.services.rebalancing import RebalancingEngine

from .fakes import FakeAssetClassProvider, FakeHoldingsProvider


@pytest.fixture
def drifted(make_holdings) -> PortfolioHoldings:
    return PortfolioHoldings(
        portfolio_id=1,
        name="Core",
        holdings=make_holdings(("A", "800", "50"), ("B", "200", "50")),
        rebalance_threshold=Decimal("5"),
        sip_target=Decimal("1000"),
        lumpsum_target=Decimal("1000"),
    )


@pytest.fixture
def engine_for():
    def _engine(*portfolios, class_maps=None, targets=None, **kwargs) -> RebalancingEngine:
        return RebalancingEngine(
            holdings_provider=FakeHoldingsProvider(*portfolios),
            asset_class_provider=FakeAssetClassProvider(class_maps, targets),
            **kwargs,
        )

    return _engine


@pytest.mark.services
@pytest.mark.unit
class TestBuildPlan:
    def test_recommendations_side_by_side(self, drifted, engine_for) -> None:
        plan = engine_for(drifted).generate_plan(1)

        assert plan.portfolio_name == "Core"
        assert plan.total_value == Decimal("1000")
        assert plan.drifted_count == 2
        assert plan.needs_rebalancing

        a, b = plan.recommendations
        assert a.fund_id == "A"
        assert a.status == AllocationStatus.OVERWEIGHT
        assert a.buy_sell_amount == Decimal("-300")
        assert a.ongoing_sip == Decimal("500")
        assert a.rebalance_sip == Decimal("0")
        assert a.target_lumpsum == Decimal("500")
        assert a.rebalance_lumpsum == Decimal("200")
        assert a.deviation == Decimal("30")

        assert b.status == AllocationStatus.UNDERWEIGHT
        assert b.buy_sell_amount == Decimal("300")
        assert b.rebalance_sip == Decimal("1000")
        assert b.rebalance_lumpsum == Decimal("800")

    def test_buy_and_sell_totals(self, drifted, engine_for) -> None:
        plan = engine_for(drifted).generate_plan(1)

        assert plan.buy_sell == {"A": Decimal("-300"), "B": Decimal("300")}
        assert plan.total_buy_amount == Decimal("300")
        assert plan.total_sell_amount == Decimal("300")
        assert plan.net_amount == Decimal("0")

    def test_no_cash_targets_means_no_cash_plans(self, make_holdings, engine_for) -> None:
        portfolio = PortfolioHoldings(
            portfolio_id=7,
            name="No SIP",
            holdings=make_holdings(("A", "500", "50"), ("B", "500", "50")),
            rebalance_threshold=Decimal("5"),
        )

        plan = engine_for(portfolio).generate_plan(7)

        assert plan.sip_plan is None
        assert plan.lumpsum_plan is None
        assert not plan.needs_rebalancing
        for rec in plan.recommendations:
            assert rec.status == AllocationStatus.BALANCED
            assert rec.ongoing_sip is None
            assert rec.rebalance_sip is None
            assert rec.target_lumpsum is None
            assert rec.rebalance_lumpsum is None

    def test_empty_portfolio(self, engine_for) -> None:
        portfolio = PortfolioHoldings(7, "Empty", (), Decimal("5"), sip_target=Decimal("500"))

        plan = engine_for(portfolio).generate_plan(7)

        assert plan.recommendations == []
        assert plan.total_value == Decimal("0")
        assert plan.sip_plan is not None
        assert plan.sip_plan.amounts == {}

    def test_unknown_portfolio_propagates(self, engine_for) -> None:
        with pytest.raises(PortfolioNotFoundError):
            engine_for().generate_plan(404)

    def test_lumpsum_shortfall_is_logged(self, make_holdings, engine_for) -> None:
        portfolio = PortfolioHoldings(
            portfolio_id=3,
            name="Mixed",
            holdings=make_holdings(("A", "620", "50"), ("B", "230", "25"), ("C", "150", "25")),
            rebalance_threshold=Decimal("5"),
            lumpsum_target=Decimal("1000"),
        )

        with patch("wealth.services.rebalancing.engine.logger") as mock_logger:
            plan = engine_for(portfolio).generate_plan(3)

        assert plan.lumpsum_plan.discrepancy == Decimal("20")
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "lumpsum_not_conserved"
        assert mock_logger.warning.call_args.kwargs["portfolio_id"] == 3

    def test_conserved_lumpsum_is_not_logged(self, drifted, engine_for) -> None:
        with patch("wealth.services.rebalancing.engine.logger") as mock_logger:
            engine_for(drifted).generate_plan(1)

        mock_logger.warning.assert_not_called()

    def test_sip_adjustment_logged_above_tolerance(self, drifted, engine_for) -> None:
        with patch("wealth.services.rebalancing.engine.logger") as mock_logger:
            engine_for(drifted, sip_adjustment_tolerance=Decimal("10")).generate_plan(1)

        events = [c.args[0] for c in mock_logger.info.call_args_list]
        assert "sip_adjustment_recommended" in events

    def test_works_through_cache(self, drifted) -> None:
        provider = FakeHoldingsProvider(drifted)
        engine = RebalancingEngine(
            holdings_provider=PortfolioCache(provider),
            asset_class_provider=FakeAssetClassProvider(),
        )

        engine.generate_plan(1)
        engine.generate_plan(1)

        assert provider.holdings_calls == [1]


@pytest.mark.services
@pytest.mark.unit
class TestPlanDataFrame:
    def test_columns_follow_available_plans(self, drifted, engine_for) -> None:
        df = engine_for(drifted).generate_plan(1).to_dataframe()

        assert df.index.name == "Fund"
        assert list(df.index) == ["A", "B"]
        assert list(df.columns) == [
            "Current_Value",
            "Current_Pct",
            "Target_Pct",
            "Target_Value",
            "Status",
            "Buy_Sell",
            "Ongoing_SIP",
            "Rebalance_SIP",
            "Target_Lumpsum",
            "Rebalance_Lumpsum",
        ]
        assert df.loc["B", "Rebalance_SIP"] == pytest.approx(1000.0)
        assert df.loc["A", "Status"] == "Overweight"

    def test_without_cash_plans(self, make_holdings, engine_for) -> None:
        portfolio = PortfolioHoldings(5, "Plain", make_holdings(("A", "1", "100")), Decimal("5"))

        df = engine_for(portfolio).generate_plan(5).to_dataframe()

        assert "Ongoing_SIP" not in df.columns
        assert "Rebalance_Lumpsum" not in df.columns

    def test_empty_plan(self, engine_for) -> None:
        df = engine_for(PortfolioHoldings(5, "Empty", (), Decimal("5"))).generate_plan(5).to_dataframe()

        assert df.empty
        assert "Buy_Sell" in df.columns


@pytest.mark.services
@pytest.mark.unit
class TestRebalancingAlerts:
    def test_alerts_across_all_portfolios(self, make_holdings, engine_for) -> None:
        core = PortfolioHoldings(
            1, "Core", make_holdings(("EQ", "8000", None), ("DB", "2000", None)), Decimal("5")
        )
        kids = PortfolioHoldings(
            2, "Kids", make_holdings(("EQ2", "6000", None), ("DB2", "4000", None)), Decimal("5")
        )
        engine = engine_for(
            core,
            kids,
            class_maps={1: {"EQ": "Equity", "DB": "Debt"}, 2: {"EQ2": "Equity", "DB2": "Debt"}},
            targets={
                1: {"Equity": Decimal("60"), "Debt": Decimal("40")},
                2: {"Equity": Decimal("60"), "Debt": Decimal("40")},
            },
        )

        report = engine.get_rebalancing_alerts()

        assert len(report.alerts) == 2
        assert {a.portfolio_name for a in report.alerts} == {"Core"}
        assert report.summary == "2 rebalancing action(s) needed"
        assert len(report.high_priority) == 2

    def test_explicit_portfolio_subset(self, make_holdings, engine_for) -> None:
        core = PortfolioHoldings(1, "Core", make_holdings(("EQ", "100", None)), Decimal("5"))
        engine = engine_for(core, class_maps={1: {"EQ": "Equity"}}, targets={1: {"Equity": Decimal("100")}})

        report = engine.get_rebalancing_alerts([1])

        assert report.alerts == []
        assert report.summary == "All portfolios are balanced"
        assert engine.holdings_provider.list_calls == 0

    def test_no_portfolios(self, engine_for) -> None:
        report = engine_for().get_rebalancing_alerts()

        assert report.alerts == []
        assert report.summary == "No portfolios to analyze"

    def test_high_priority_cutoff_override(self, make_holdings, engine_for) -> None:
        core = PortfolioHoldings(
            1, "Core", make_holdings(("EQ", "7000", None), ("DB", "3000", None)), Decimal("5")
        )
        engine = engine_for(
            core,
            class_maps={1: {"EQ": "Equity", "DB": "Debt"}},
            targets={1: {"Equity": Decimal("60"), "Debt": Decimal("40")}},
            high_priority_deviation=Decimal("20"),
        )

        report = engine.get_rebalancing_alerts()

        assert report.high_priority == []
        assert len(report.alerts) == 2


@pytest.mark.services
@pytest.mark.unit
class TestRebalancingEngineSettings:
    def test_reads_settings(self, settings) -> None:
        settings.WEALTH_SIP_ADJUSTMENT_TOLERANCE = "25"
        settings.WEALTH_HIGH_PRIORITY_DEVIATION = 15

        engine = RebalancingEngine(FakeHoldingsProvider(), FakeAssetClassProvider())

        assert engine.sip_adjustment_tolerance == Decimal("25")
        assert engine.high_priority_deviation == Decimal("15")

    def test_malformed_setting(self, settings) -> None:
        settings.WEALTH_SIP_ADJUSTMENT_TOLERANCE = "ten"

        with pytest.raises(ImproperlyConfigured, match="WEALTH_SIP_ADJUSTMENT_TOLERANCE='ten' is not a number"):
            RebalancingEngine(FakeHoldingsProvider(), FakeAssetClassProvider())

    def test_negative_setting(self, settings) -> None:
        settings.WEALTH_HIGH_PRIORITY_DEVIATION = "-1"

        with pytest.raises(ImproperlyConfigured, match="WEALTH_HIGH_PRIORITY_DEVIATION"):
            RebalancingEngine(FakeHoldingsProvider(), FakeAssetClassProvider())


@pytest.mark.services
@pytest.mark.integration
@pytest.mark.django_db
class TestRebalancingEngineWithDatabase:
    def test_generate_plan_from_models(self, balanced_portfolio) -> None:
        balanced_portfolio.sip_target = Decimal("5000")
        balanced_portfolio.save()

        plan = RebalancingEngine().generate_plan(balanced_portfolio.pk)

        assert plan.buy_sell == {"120503": Decimal("-2000"), "119551": Decimal("2000")}
        assert plan.sip_plan.amounts == {"120503": Decimal("0"), "119551": Decimal("5000")}
        assert plan.lumpsum_plan is None

    def test_alerts_from_models(self, balanced_portfolio) -> None:
        report = RebalancingEngine().get_rebalancing_alerts()

        assert {a.asset_class for a in report.alerts} == {"Equity", "Debt"}
        assert all(a.deviation_amount == Decimal("2000") for a in report.alerts)

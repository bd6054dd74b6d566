from typing import Any

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError, CommandParser

from wealth.exceptions import PortfolioError
from wealth.services.data_providers import DjangoAssetClassProvider, DjangoHoldingsProvider
from wealth.services.rebalancing import RebalancingEngine


class Command(BaseCommand):
    help = "Print the rebalancing plan for a portfolio and/or asset-class alerts"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("--portfolio", type=int, help="Portfolio ID to plan")
        parser.add_argument(
            "--alerts", action="store_true", help="Print asset-class alerts for all portfolios"
        )
        parser.add_argument(
            "--user", help="Only consider portfolios owned by this username"
        )

    def handle(self, *args: Any, **options: Any) -> None:
        portfolio_id = options.get("portfolio")
        show_alerts = options.get("alerts")
        if portfolio_id is None and not show_alerts:
            raise CommandError("Pass --portfolio ID and/or --alerts")

        engine = self._build_engine(options.get("user"))

        try:
            if portfolio_id is not None:
                self._write_plan(engine, portfolio_id)
            if show_alerts:
                self._write_alerts(engine)
        except PortfolioError as e:
            raise CommandError(str(e)) from e

    def _build_engine(self, username: str | None) -> RebalancingEngine:
        if username is None:
            return RebalancingEngine()

        User = get_user_model()
        try:
            user = User.objects.get(username=username)
        except User.DoesNotExist as e:
            raise CommandError(f"User '{username}' not found") from e

        holdings_provider = DjangoHoldingsProvider(user=user)
        return RebalancingEngine(
            holdings_provider=holdings_provider,
            asset_class_provider=DjangoAssetClassProvider(holdings_provider),
        )

    def _write_plan(self, engine: RebalancingEngine, portfolio_id: int) -> None:
        plan = engine.generate_plan(portfolio_id)

        self.stdout.write(
            f"{plan.portfolio_name}: total {plan.total_value:.2f}, "
            f"threshold {plan.threshold}%, {plan.drifted_count} fund(s) drifted"
        )
        df = plan.to_dataframe()
        if df.empty:
            self.stdout.write("No holdings")
            return
        self.stdout.write(df.round(2).to_string())

        if plan.lumpsum_plan is not None and not plan.lumpsum_plan.is_conserved():
            self.stdout.write(
                self.style.WARNING(
                    f"Smart lumpsum allocates {plan.lumpsum_plan.allocated:.2f} "
                    f"of {plan.lumpsum_plan.cash_amount:.2f}"
                )
            )

    def _write_alerts(self, engine: RebalancingEngine) -> None:
        report = engine.get_rebalancing_alerts()

        for alert in report.alerts:
            self.stdout.write(
                f"{alert.portfolio_name} | {alert.asset_class} | "
                f"target {alert.target_percent:.2f}% | current {alert.current_percent:.2f}% | "
                f"{alert.action} {alert.deviation_amount:.2f} | {alert.priority}"
            )

        style = self.style.WARNING if report.alerts else self.style.SUCCESS
        self.stdout.write(style(report.summary))

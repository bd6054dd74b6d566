from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import wealth.models.portfolio


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AssetClass",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Asset class name (e.g., 'Equity')", max_length=100, unique=True)),
            ],
            options={
                "verbose_name_plural": "Asset Classes",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Fund",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scheme_code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=200)),
                (
                    "asset_class",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="funds",
                        to="wealth.assetclass",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Portfolio",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                (
                    "rebalance_threshold",
                    models.DecimalField(
                        decimal_places=2,
                        default=wealth.models.portfolio.default_rebalance_threshold,
                        help_text="Minimum deviation (percentage points) before buy/sell is recommended",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "sip_target",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Monthly SIP amount to distribute across funds",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "lumpsum_target",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="One-time lump sum to distribute across funds",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="portfolios",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "name"), name="unique_portfolio_name_per_user"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FundHolding",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "current_value",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "target_percent",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Target share of portfolio value; empty means not part of the plan",
                        max_digits=5,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "fund",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="holdings",
                        to="wealth.fund",
                    ),
                ),
                (
                    "portfolio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="holdings",
                        to="wealth.portfolio",
                    ),
                ),
            ],
            options={
                "ordering": ["portfolio", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("portfolio", "fund"), name="unique_fund_per_portfolio"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AssetClassTarget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "target_percent",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "asset_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="portfolio_targets",
                        to="wealth.assetclass",
                    ),
                ),
                (
                    "portfolio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="asset_class_targets",
                        to="wealth.portfolio",
                    ),
                ),
            ],
            options={
                "ordering": ["portfolio", "asset_class__name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("portfolio", "asset_class"), name="unique_asset_class_target_per_portfolio"
                    ),
                ],
            },
        ),
    ]

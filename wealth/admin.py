from django.contrib import admin
from django.db.models import Sum

from .models import AssetClass, AssetClassTarget, Fund, FundHolding, Portfolio


class FundHoldingInline(admin.TabularInline):
    model = FundHolding
    extra = 0
    autocomplete_fields = ["fund"]


class AssetClassTargetInline(admin.TabularInline):
    model = AssetClassTarget
    extra = 0


class PortfolioAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "user",
        "rebalance_threshold",
        "sip_target",
        "lumpsum_target",
        "get_total_target",
    )
    list_filter = ("user",)
    search_fields = ("name", "user__username")
    inlines = (FundHoldingInline, AssetClassTargetInline)

    @admin.display(description="Total Target %")
    def get_total_target(self, obj: Portfolio) -> str:
        total = obj.holdings.aggregate(Sum("target_percent"))["target_percent__sum"]
        if total is None:
            return "0.00%"
        return f"{total}%"


class FundAdmin(admin.ModelAdmin):
    list_display = ("scheme_code", "name", "asset_class")
    list_filter = ("asset_class",)
    search_fields = ("scheme_code", "name")


class AssetClassAdmin(admin.ModelAdmin):
    search_fields = ("name",)
    ordering = ("name",)


admin.site.register(AssetClass, AssetClassAdmin)
admin.site.register(Fund, FundAdmin)
admin.site.register(Portfolio, PortfolioAdmin)

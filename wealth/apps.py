from django.apps import AppConfig


class WealthConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "wealth"
    verbose_name = "Family Wealth"

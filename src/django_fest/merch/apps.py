"""Django app configuration for the merchandise app."""

from django.apps import AppConfig


class DjangoFestMerchConfig(AppConfig):
    """Configuration for the merchandise order app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_fest.merch"
    label = "fest_merch"
    verbose_name = "Merchandise"

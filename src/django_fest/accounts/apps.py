"""Django app configuration for the accounts app."""

from django.apps import AppConfig


class DjangoFestAccountsConfig(AppConfig):
    """Configuration for the accounts app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_fest.accounts"
    label = "fest_accounts"
    verbose_name = "Accounts"

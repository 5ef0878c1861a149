"""Django app configuration for the teams app."""

from django.apps import AppConfig


class DjangoFestTeamsConfig(AppConfig):
    """Configuration for the team formation app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_fest.teams"
    label = "fest_teams"
    verbose_name = "Teams"

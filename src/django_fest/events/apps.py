"""Django app configuration for the events app."""

from django.apps import AppConfig


class DjangoFestEventsConfig(AppConfig):
    """Configuration for the events app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_fest.events"
    label = "fest_events"
    verbose_name = "Events"

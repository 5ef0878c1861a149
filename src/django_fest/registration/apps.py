"""Django app configuration for the registration app."""

from django.apps import AppConfig


class DjangoFestRegistrationConfig(AppConfig):
    """Configuration for the registration app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_fest.registration"
    label = "fest_registration"
    verbose_name = "Registration"

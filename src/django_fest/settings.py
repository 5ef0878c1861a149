"""Typed configuration for django-fest.

Reads a single ``DJANGO_FEST`` dict from Django settings and exposes it as
composed, frozen dataclasses with sensible defaults.

Usage::

    from django_fest.settings import get_config

    config = get_config()
    config.teams.default_max_size
    config.notifications.webhook_url
"""

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field

from django.conf import settings
from django.test.signals import setting_changed


@dataclass(frozen=True, slots=True)
class TeamConfig:
    """Team formation policy.

    ``default_min_size``/``default_max_size`` apply when a team event leaves
    its own bounds unset.
    """

    default_min_size: int = 2
    default_max_size: int = 5
    invite_code_attempts: int = 5
    invite_code_bytes: int = 4


@dataclass(frozen=True, slots=True)
class TicketConfig:
    """Ticket issuing configuration."""

    prefix: str = "TKT"
    qr_base_url: str = "https://api.qrserver.com/v1/create-qr-code/"
    qr_size: str = "220x220"
    issuer: str = "django_fest.registration.tickets.QRTicketIssuer"


@dataclass(frozen=True, slots=True)
class NotificationConfig:
    """Outbound e-mail webhook configuration.

    When ``webhook_url`` is unset, notifications are logged instead of sent.
    """

    webhook_url: str | None = None
    timeout: float = 10.0
    sink: str = "django_fest.notifications.WebhookNotificationSink"


@dataclass(frozen=True, slots=True)
class FestConfig:
    """Top-level django-fest configuration."""

    teams: TeamConfig = field(default_factory=TeamConfig)
    tickets: TicketConfig = field(default_factory=TicketConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)


@functools.lru_cache(maxsize=1)
def get_config() -> FestConfig:
    """Build and return the fest configuration.

    Reads ``settings.DJANGO_FEST`` (a plain dict) and returns a frozen
    :class:`FestConfig`.  The result is cached; the cache is cleared
    automatically when Django's ``setting_changed`` signal fires (e.g. inside
    ``override_settings``).
    """
    raw = getattr(settings, "DJANGO_FEST", {})
    if not isinstance(raw, Mapping):
        msg = "DJANGO_FEST must be a mapping (dict-like object)"
        raise TypeError(msg)
    raw_data = dict(raw)

    sections = {}
    for name in ("teams", "tickets", "notifications"):
        section = raw_data.pop(name, {})
        if not isinstance(section, Mapping):
            msg = f"DJANGO_FEST['{name}'] must be a mapping (dict-like object)"
            raise TypeError(msg)
        sections[name] = dict(section)

    config = FestConfig(
        teams=TeamConfig(**sections["teams"]),
        tickets=TicketConfig(**sections["tickets"]),
        notifications=NotificationConfig(**sections["notifications"]),
        **raw_data,
    )
    _validate_fest_config(config)
    return config


def _validate_fest_config(config: FestConfig) -> None:
    """Validate high-impact configuration values with clear error messages."""
    teams = config.teams
    for key in ("default_min_size", "default_max_size", "invite_code_attempts", "invite_code_bytes"):
        value = getattr(teams, key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            msg = f"DJANGO_FEST['teams']['{key}'] must be a positive integer"
            raise ValueError(msg)
    if teams.default_min_size > teams.default_max_size:
        msg = "DJANGO_FEST['teams']['default_min_size'] cannot exceed 'default_max_size'"
        raise ValueError(msg)
    if not isinstance(config.tickets.prefix, str) or not config.tickets.prefix.strip():
        msg = "DJANGO_FEST['tickets']['prefix'] must be a non-empty string"
        raise ValueError(msg)
    timeout = config.notifications.timeout
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        msg = "DJANGO_FEST['notifications']['timeout'] must be a positive number"
        raise ValueError(msg)


def _clear_config_cache(*, setting: str, **kwargs: object) -> None:  # noqa: ARG001
    """Clear the cached config when Django settings change during tests."""
    if setting == "DJANGO_FEST":
        get_config.cache_clear()


setting_changed.connect(_clear_config_cache, dispatch_uid="django_fest.settings.clear_config_cache")

"""Best-effort e-mail notifications.

Notifications are fire-and-forget: a failed delivery is logged and reported
as ``False`` but never interrupts the registration flow that triggered it.
The default sink POSTs ``{"to", "subject", "body"}`` to a mail webhook; with
no webhook configured it only logs the message.
"""

import logging

import httpx
from django.utils.module_loading import import_string

from django_fest.settings import NotificationConfig, get_config

logger = logging.getLogger(__name__)


class NotificationSink:
    """Base notification sink."""

    def __init__(self, config: NotificationConfig | None = None) -> None:
        self.config = config or get_config().notifications

    def notify(self, to: str, subject: str, body: str) -> bool:
        """Deliver a message and report whether it was accepted."""
        raise NotImplementedError


class WebhookNotificationSink(NotificationSink):
    """Deliver notifications through an HTTP mail webhook."""

    def notify(self, to: str, subject: str, body: str) -> bool:
        if not to or not subject or not body:
            return False

        if not self.config.webhook_url:
            logger.info("Simulated email notification to %s: %s", to, subject)
            return True

        try:
            response = httpx.post(
                self.config.webhook_url,
                json={"to": to, "subject": subject, "body": body},
                timeout=self.config.timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Email notification to %s failed: %s", to, exc)
            return False

        if not response.is_success:
            logger.warning("Email webhook rejected notification to %s (HTTP %s)", to, response.status_code)
            return False
        return True


def get_notification_sink() -> NotificationSink:
    """Instantiate the configured notification sink."""
    config = get_config().notifications
    sink_class = import_string(config.sink)
    return sink_class(config)


def send_notification(to: str, subject: str, body: str) -> bool:
    """Send a notification through the configured sink without ever raising.

    Returns:
        ``True`` if the sink accepted the message.
    """
    try:
        return get_notification_sink().notify(to, subject, body)
    except Exception:
        logger.exception("Notification sink raised while sending to %s", to)
        return False

"""Ticket issuing for confirmed registrations.

A ticket is an identifier plus a scannable-code reference. The default
issuer builds a QR image URL; deployments can point
``DJANGO_FEST["tickets"]["issuer"]`` at another :class:`TicketIssuer`.
"""

import json
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

from django.utils.module_loading import import_string

from django_fest.settings import TicketConfig, get_config


@dataclass(frozen=True, slots=True)
class Ticket:
    """A minted ticket."""

    ticket_id: str
    code_ref: str


class TicketIssuer:
    """Base ticket issuer."""

    def __init__(self, config: TicketConfig | None = None) -> None:
        self.config = config or get_config().tickets

    def mint(self, event_id: int, user_id: int) -> Ticket:
        """Return a new ticket for the (event, user) pair."""
        raise NotImplementedError


def _tail(value: object, width: int = 6) -> str:
    return str(value)[-width:].upper().rjust(width, "0")


class QRTicketIssuer(TicketIssuer):
    """Issue ``TKT-<EVENT>-<USER>-<RANDOM>`` ids with a QR image URL.

    The random suffix makes each call unique; the QR payload carries the
    ticket id together with the event and user ids.
    """

    def mint(self, event_id: int, user_id: int) -> Ticket:
        ticket_id = f"{self.config.prefix}-{_tail(event_id)}-{_tail(user_id)}-{secrets.token_hex(3).upper()}"
        payload = json.dumps({"ticketId": ticket_id, "eventId": str(event_id), "userId": str(user_id)})
        query = urlencode({"size": self.config.qr_size, "data": payload})
        return Ticket(ticket_id=ticket_id, code_ref=f"{self.config.qr_base_url}?{query}")


def get_ticket_issuer() -> TicketIssuer:
    """Instantiate the configured ticket issuer."""
    config = get_config().tickets
    issuer_class = import_string(config.issuer)
    return issuer_class(config)

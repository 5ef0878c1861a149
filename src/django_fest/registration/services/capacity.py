"""Per-event seat accounting shared by every registration path.

Individual registration, team completion, and merchandise approval all draw
on the same ``Event.registration_limit``. The authoritative occupancy is the
number of non-cancelled :class:`Registration` rows; ``Event.registration_count``
is a cache of that number that is bumped by single-seat registrations and
restored with :func:`resync` after any bulk or out-of-band insert.
"""

import logging

from django.db import transaction

from django_fest.events.models import Event
from django_fest.exceptions import CapacityError, NotFoundError
from django_fest.registration.models import Registration

logger = logging.getLogger(__name__)


def active_registration_count(event: Event) -> int:
    """Return the number of registrations currently occupying a seat.

    Args:
        event: The event to count registrations for.
    """
    return Registration.objects.filter(event_id=event.pk).exclude(status=Registration.Status.CANCELLED).count()


def check_capacity(event: Event, seats: int = 1, *, recount: bool = False) -> bool:
    """Return whether *seats* more registrations fit under the event's limit.

    Single-seat paths may use the cached counter as a fast check. Multi-seat
    grants must pass ``recount=True`` so the decision is made against a
    fresh count of registrations.

    Args:
        event: The event to check.
        seats: Number of additional registrations requested.
        recount: Count registrations instead of trusting the cached counter.
    """
    if event.registration_limit == 0:
        return True
    occupied = active_registration_count(event) if recount else event.registration_count
    return occupied + seats <= event.registration_limit


def ensure_capacity(event: Event, seats: int = 1, *, recount: bool = False) -> None:
    """Raise ``CapacityError`` unless :func:`check_capacity` passes."""
    if not check_capacity(event, seats, recount=recount):
        raise CapacityError


def get_remaining(event: Event) -> int | None:
    """Return the number of seats still free.

    Returns:
        The remaining seat count (never negative), or ``None`` if the event
        has no registration limit (``registration_limit == 0``).
    """
    if event.registration_limit == 0:
        return None
    return max(event.registration_limit - active_registration_count(event), 0)


def resync(event: Event) -> int:
    """Recompute and persist ``registration_count`` from the registration table.

    Args:
        event: The event whose cached counter should be restored. The
            instance is updated in place.

    Returns:
        The authoritative count now stored on the event.
    """
    count = active_registration_count(event)
    Event.objects.filter(pk=event.pk).update(registration_count=count)
    if event.registration_count != count:
        logger.info(
            "Resynced registration count for event %s: %s -> %s",
            event.pk,
            event.registration_count,
            count,
        )
    event.registration_count = count
    return count


def lock_event(event_id: int) -> Event:
    """Fetch an event with a row-level lock.

    The caller **must** already be inside a ``transaction.atomic`` block; the
    lock serializes seat and membership changes for the event until commit.

    Raises:
        NotFoundError: If the event does not exist.
    """
    if not transaction.get_connection().in_atomic_block:
        msg = "lock_event() must be called inside transaction.atomic()"
        raise RuntimeError(msg)
    event = Event.objects.select_for_update().filter(pk=event_id).first()
    if event is None:
        raise NotFoundError("Event not found")
    return event

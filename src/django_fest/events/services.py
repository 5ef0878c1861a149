"""Event lookups shared by the registration, team, and merchandise services."""

from django_fest.events.models import Event, Organizer
from django_fest.exceptions import ForbiddenError, NotFoundError


def get_event(event_id: int) -> Event:
    """Return the event or raise ``NotFoundError``."""
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        raise NotFoundError("Event not found")
    return event


def get_active_organizer(user_id: int) -> Organizer:
    """Return the organizer profile owned by *user_id*.

    Raises:
        NotFoundError: If the account has no organizer profile.
        ForbiddenError: If the organizer is disabled or archived.
    """
    organizer = Organizer.objects.filter(account_id=user_id).first()
    if organizer is None:
        raise NotFoundError("Organizer profile not found")
    if not organizer.is_active:
        raise ForbiddenError("Your organizer account has been disabled")
    return organizer


def get_owned_event(organizer_user_id: int, event_id: int) -> Event:
    """Return an event the calling organizer owns.

    Args:
        organizer_user_id: The organizer's account user id.
        event_id: The event to resolve.

    Raises:
        NotFoundError: If the organizer profile or event is missing.
        ForbiddenError: If the organizer is inactive or does not own the event.
    """
    organizer = get_active_organizer(organizer_user_id)
    event = get_event(event_id)
    if event.organizer_id != organizer.pk:
        raise ForbiddenError("Forbidden: cannot access another organizer's event")
    return event

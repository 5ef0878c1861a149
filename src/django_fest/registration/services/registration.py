"""Individual registration service.

Registers a single participant for a non-team event and provides the
insert-if-absent registration write shared with team completion and
merchandise approval. All methods are stateless.
"""

import logging
from collections.abc import Iterable
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from django_fest.accounts.identity import get_identity, is_eligible
from django_fest.events.models import Event
from django_fest.events.services import get_owned_event
from django_fest.exceptions import CapacityError, ConflictError, ValidationError
from django_fest.notifications import send_notification
from django_fest.registration.form_schema import validate_form_responses
from django_fest.registration.models import Registration
from django_fest.registration.services.capacity import check_capacity, lock_event
from django_fest.registration.signals import registration_confirmed
from django_fest.registration.tickets import TicketIssuer, get_ticket_issuer

logger = logging.getLogger(__name__)


class RegistrationService:
    """Stateless service for participant registrations."""

    @staticmethod
    def register(event_id: int, user_id: int, form_responses: Any = None) -> Registration:
        """Register a participant for a non-team event.

        Preconditions are checked in a fixed order while holding the event
        row lock, and nothing is written until all of them pass. The ticket
        e-mail and the registration_confirmed signal go out after the
        registration is committed; a failed delivery or a raising receiver
        does not affect the result.

        Args:
            event_id: The event to register for.
            user_id: The registering participant.
            form_responses: ``[{"question", "answer"}]`` answers to the
                event's form schema.

        Returns:
            The created Registration.

        Raises:
            NotFoundError: If the event or user does not exist.
            ValidationError: If the event is a team event, the participant is
                ineligible, the deadline passed, the event is not published
                or registrations are closed, or a required form answer is
                missing.
            CapacityError: If the event is fully booked.
            ConflictError: If the participant is already registered.
        """
        with transaction.atomic():
            event = lock_event(event_id)
            if event.is_team_event:
                raise ValidationError("This is a team event. Use team registration workflow")

            identity = get_identity(user_id)
            if not is_eligible(identity, event.eligibility):
                raise ValidationError("You are not eligible for this event")
            if event.deadline_passed:
                raise ValidationError("Registration deadline has passed")
            if not check_capacity(event, 1):
                raise CapacityError
            if event.status != Event.Status.PUBLISHED:
                raise ValidationError("Event is not open for registration")
            if not event.registration_open:
                raise ValidationError("Registrations are closed for this event")
            if Registration.objects.filter(event_id=event.pk, user_id=user_id).exists():
                raise ConflictError("You are already registered for this event")

            responses = validate_form_responses(event.form_schema, form_responses)

            ticket = get_ticket_issuer().mint(event.pk, user_id)
            try:
                with transaction.atomic():
                    registration = Registration.objects.create(
                        event=event,
                        user_id=user_id,
                        status=Registration.Status.REGISTERED,
                        source=Registration.Source.INDIVIDUAL,
                        form_responses=responses,
                        ticket_id=ticket.ticket_id,
                        qr_code_url=ticket.code_ref,
                    )
            except IntegrityError as exc:
                raise ConflictError("You are already registered for this event") from exc

            event.registration_count += 1
            event.save(update_fields=["registration_count", "updated_at"])
            transaction.on_commit(
                lambda: registration_confirmed.send(
                    sender=Registration, registration=registration, source=Registration.Source.INDIVIDUAL
                ),
                robust=True,
            )

        logger.info("Registered user %s for event %s (ticket %s)", user_id, event.pk, ticket.ticket_id)
        send_notification(
            identity.email,
            f"Registration Confirmed: {event.name}",
            f"Hi {identity.first_name or 'Participant'}, your ticket ID is {ticket.ticket_id}. QR: {ticket.code_ref}",
        )
        return registration

    @staticmethod
    def ensure_registration(
        event: Event,
        user_id: int,
        *,
        source: str,
        team_name: str = "",
        team_member_ids: Iterable[int] = (),
        form_responses: list[dict[str, Any]] | None = None,
        issuer: TicketIssuer | None = None,
    ) -> tuple[Registration, bool]:
        """Insert a registration for (event, user) unless one already exists.

        The first writer wins: an existing registration, from any path, is
        returned untouched. Concurrent inserts for the same pair collapse
        onto the unique constraint.

        Args:
            event: The event being registered for.
            user_id: The participant.
            source: The ``Registration.Source`` of the calling workflow.
            team_name: Team name to snapshot for team registrations.
            team_member_ids: Ids of the participant's teammates.
            form_responses: Answers to copy onto the registration.
            issuer: Ticket issuer to use; defaults to the configured one.

        Returns:
            A ``(registration, created)`` tuple.
        """
        ticket = (issuer or get_ticket_issuer()).mint(event.pk, user_id)
        registration, created = Registration.objects.get_or_create(
            event=event,
            user_id=user_id,
            defaults={
                "status": Registration.Status.REGISTERED,
                "source": source,
                "team_name": team_name,
                "team_member_ids": [member_id for member_id in team_member_ids if member_id != user_id],
                "form_responses": form_responses or [],
                "ticket_id": ticket.ticket_id,
                "qr_code_url": ticket.code_ref,
            },
        )
        if created:
            transaction.on_commit(
                lambda: registration_confirmed.send(sender=Registration, registration=registration, source=source)
            )
        return registration, created

    @staticmethod
    def get_registration(event_id: int, user_id: int) -> Registration | None:
        """Return the participant's registration for an event, if any."""
        return Registration.objects.filter(event_id=event_id, user_id=user_id).select_related("event").first()

    @staticmethod
    def list_for_user(user_id: int) -> dict[str, list[Registration]]:
        """Group a participant's registrations for their dashboard.

        Buckets:

        * ``cancelled`` -- cancelled registrations or cancelled events
        * ``merchandise`` -- registrations obtained through merchandise events
        * ``normal`` -- every other registration (participation history)
        * ``completed`` -- normal registrations whose event has ended
        * ``upcoming`` -- normal registrations whose event is still ahead

        Returns:
            A dict of bucket name to registrations, newest first.
        """
        buckets: dict[str, list[Registration]] = {
            "upcoming": [],
            "normal": [],
            "merchandise": [],
            "completed": [],
            "cancelled": [],
        }
        now = timezone.now()
        registrations = (
            Registration.objects.filter(user_id=user_id).select_related("event", "event__organizer").order_by("-created_at")
        )
        for registration in registrations:
            event = registration.event
            if registration.status == Registration.Status.CANCELLED or event.status == Event.Status.CANCELLED:
                buckets["cancelled"].append(registration)
                continue
            if event.is_merchandise:
                buckets["merchandise"].append(registration)
                continue
            buckets["normal"].append(registration)
            if event.status == Event.Status.COMPLETED or (event.end_date and event.end_date < now):
                buckets["completed"].append(registration)
            else:
                buckets["upcoming"].append(registration)
        return buckets

    @staticmethod
    def list_for_event(
        organizer_user_id: int,
        event_id: int,
        status: str | None = None,
        search: str | None = None,
    ) -> list[Registration]:
        """Return the registrations of an event the organizer owns, newest first.

        Args:
            organizer_user_id: The organizer's account user id.
            event_id: The event whose participants to list.
            status: Only include registrations in this status.
            search: Case-insensitive match on the participant's first name,
                last name or e-mail.

        Raises:
            NotFoundError: If the organizer profile or event is missing.
            ForbiddenError: If the organizer may not act on the event.
        """
        event = get_owned_event(organizer_user_id, event_id)
        registrations = event.registrations.select_related("user", "event")
        if status:
            registrations = registrations.filter(status=status)
        term = search.strip() if isinstance(search, str) else ""
        if term:
            registrations = registrations.filter(
                Q(user__first_name__icontains=term) | Q(user__last_name__icontains=term) | Q(user__email__icontains=term)
            )
        return list(registrations.order_by("-created_at"))

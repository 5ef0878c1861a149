"""JSON representations of registrations."""

from typing import Any

from django_fest.registration.models import Registration
from django_fest.views import isoformat


def serialize_registration(registration: Registration) -> dict[str, Any]:
    """Return the participant-facing view of a registration."""
    event = registration.event
    return {
        "registrationId": registration.pk,
        "event": {
            "eventId": event.pk,
            "name": event.name,
            "eventType": event.event_type,
            "status": event.status,
            "startDate": isoformat(event.start_date),
            "endDate": isoformat(event.end_date),
            "venue": event.venue,
        },
        "status": registration.status,
        "source": registration.source,
        "teamName": registration.team_name,
        "teamMembers": list(registration.team_member_ids),
        "formResponses": registration.form_responses,
        "ticketId": registration.ticket_id,
        "qrCodeUrl": registration.qr_code_url,
        "createdAt": isoformat(registration.created_at),
    }


def serialize_participant(registration: Registration) -> dict[str, Any]:
    """Return the organizer-facing view of a registration."""
    user = registration.user
    return {
        "registrationId": registration.pk,
        "userId": user.pk,
        "name": user.get_full_name(),
        "email": user.email,
        "status": registration.status,
        "source": registration.source,
        "teamName": registration.team_name,
        "teamSize": 1 + len(registration.team_member_ids),
        "attended": registration.status == Registration.Status.ATTENDED,
        "ticketId": registration.ticket_id,
        "registeredAt": isoformat(registration.created_at),
    }

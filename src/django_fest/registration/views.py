"""JSON views for participant registration."""

from typing import TYPE_CHECKING

from django.http import JsonResponse

from django_fest.registration.serializers import serialize_participant, serialize_registration
from django_fest.registration.services.registration import RegistrationService
from django_fest.views import FestJSONView

if TYPE_CHECKING:
    from django.http import HttpRequest


class RegisterView(FestJSONView):
    """Register the current user for a non-team event."""

    def post(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        """Create a registration from ``{"formResponses": [...]}``."""
        payload = self.read_json()
        registration = RegistrationService.register(event_id, request.user.pk, payload.get("formResponses"))
        return JsonResponse(serialize_registration(registration), status=201)


class MyEventRegistrationView(FestJSONView):
    """The current user's registration for one event."""

    def get(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        registration = RegistrationService.get_registration(event_id, request.user.pk)
        return JsonResponse(
            {"registration": serialize_registration(registration) if registration is not None else None}
        )


class MyRegistrationsView(FestJSONView):
    """The current user's registrations grouped for the dashboard."""

    def get(self, request: "HttpRequest") -> JsonResponse:
        buckets = RegistrationService.list_for_user(request.user.pk)
        return JsonResponse(
            {name: [serialize_registration(r) for r in registrations] for name, registrations in buckets.items()}
        )


class OrganizerRegistrationsView(FestJSONView):
    """Participants of an event, for its organizer.

    Accepts optional ``status`` and ``search`` query parameters.
    """

    def get(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        registrations = RegistrationService.list_for_event(
            request.user.pk,
            event_id,
            status=request.GET.get("status") or None,
            search=request.GET.get("search"),
        )
        return JsonResponse({"registrations": [serialize_participant(r) for r in registrations]})

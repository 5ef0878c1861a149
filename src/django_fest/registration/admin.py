"""Django admin configuration for the registration app."""

from typing import TYPE_CHECKING

from django.contrib import admin

from django_fest.registration.models import Registration
from django_fest.registration.services.capacity import resync

if TYPE_CHECKING:
    from django.forms import ModelForm
    from django.http import HttpRequest


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    """Admin interface for registrations.

    Ticket data and team snapshots are read-only; only the status is meant
    to be changed here (cancellation, attendance). Saving restores the
    event's cached registration count.
    """

    list_display = ("ticket_id", "user", "event", "status", "source", "team_name", "created_at")
    list_filter = ("status", "source", "event")
    search_fields = ("ticket_id", "user__username", "user__email", "team_name")
    raw_id_fields = ("user", "event")
    readonly_fields = (
        "source",
        "team_name",
        "team_member_ids",
        "form_responses",
        "ticket_id",
        "qr_code_url",
        "created_at",
        "updated_at",
    )

    def save_model(self, request: "HttpRequest", obj: Registration, form: "ModelForm", change: bool) -> None:  # noqa: FBT001
        """Save the registration, then resync the event's seat counter."""
        super().save_model(request, obj, form, change)
        resync(obj.event)

"""Django admin configuration for the events app."""

from django.contrib import admin

from django_fest.events.models import Event, MerchItem, Organizer


@admin.register(Organizer)
class OrganizerAdmin(admin.ModelAdmin):
    """Admin interface for organizer accounts."""

    list_display = ("name", "category", "contact_email", "status")
    list_filter = ("status", "category")
    search_fields = ("name", "contact_email")
    raw_id_fields = ("account",)


class MerchItemInline(admin.TabularInline):
    """Inline editing of merchandise items on their event."""

    model = MerchItem
    extra = 0
    fields = ("name", "price", "stock", "variants", "limit_per_user", "order")


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin interface for events.

    ``registration_count`` is read-only; it is restored from the registration
    table by the capacity ledger, never edited by hand.
    """

    list_display = (
        "name",
        "organizer",
        "event_type",
        "status",
        "registration_deadline",
        "registration_count",
        "registration_limit",
        "is_team_event",
    )
    list_filter = ("event_type", "status", "eligibility", "is_team_event")
    search_fields = ("name", "organizer__name")
    readonly_fields = ("registration_count", "created_at", "updated_at")
    inlines = [MerchItemInline]

"""Django admin configuration for the merchandise app."""

from django.contrib import admin

from django_fest.merch.models import MerchOrder


@admin.register(MerchOrder)
class MerchOrderAdmin(admin.ModelAdmin):
    """Admin interface for merchandise orders.

    Reviews go through the organizer workflow so that stock and
    registrations stay in step; the admin shows review fields read-only.
    """

    list_display = ("item_name", "variant", "quantity", "user", "event", "status", "total_amount", "created_at")
    list_filter = ("status", "event")
    search_fields = ("item_name", "user__email", "user__username")
    raw_id_fields = ("event", "organizer", "user")
    readonly_fields = (
        "unit_price",
        "total_amount",
        "status",
        "review_comment",
        "reviewed_by",
        "reviewed_at",
        "created_at",
        "updated_at",
    )

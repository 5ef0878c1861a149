"""Django admin configuration for the accounts app."""

from django.contrib import admin

from django_fest.accounts.models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin interface for fest profiles."""

    list_display = ("user", "role", "participant_type", "college_or_org")
    list_filter = ("role", "participant_type")
    search_fields = ("user__username", "user__email", "college_or_org")
    raw_id_fields = ("user",)

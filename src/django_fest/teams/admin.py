"""Django admin configuration for the teams app."""

from typing import TYPE_CHECKING

from django.contrib import admin

if TYPE_CHECKING:
    from django.http import HttpRequest

from django_fest.teams.models import TeamInvite, TeamMember, TeamRegistration


class TeamMemberInline(admin.TabularInline):
    """Read-only listing of a team's members."""

    model = TeamMember
    extra = 0
    fields = ("user", "status", "joined_at")
    readonly_fields = ("user", "status", "joined_at")
    can_delete = False


class TeamInviteInline(admin.TabularInline):
    """Read-only listing of a team's invites."""

    model = TeamInvite
    extra = 0
    fields = ("email", "user", "status", "responded_at")
    readonly_fields = ("email", "user", "status", "responded_at")
    can_delete = False


@admin.register(TeamRegistration)
class TeamRegistrationAdmin(admin.ModelAdmin):
    """Admin interface for teams.

    Membership and completion are driven by the team workflow, so members,
    invites and status are shown read-only.
    """

    list_display = ("team_name", "event", "leader", "team_size", "status", "created_at")
    list_filter = ("status", "event")
    search_fields = ("team_name", "invite_code", "leader__email")
    raw_id_fields = ("event", "leader")
    readonly_fields = ("invite_code", "status", "completed_at", "created_at", "updated_at")
    inlines = [TeamMemberInline, TeamInviteInline]

    def has_add_permission(self, request: "HttpRequest") -> bool:  # noqa: ARG002, D102
        return False

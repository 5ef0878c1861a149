"""JSON views for team registration."""

from typing import TYPE_CHECKING

from django.http import JsonResponse

from django_fest.teams.serializers import serialize_team
from django_fest.teams.services.formation import TeamService, build_team_view
from django_fest.views import FestJSONView

if TYPE_CHECKING:
    from django.http import HttpRequest

    from django_fest.teams.models import TeamRegistration


class TeamJSONView(FestJSONView):
    """Base for views that answer with the caller's view of a team."""

    def render_team(self, team: "TeamRegistration", status: int = 200) -> JsonResponse:
        view = build_team_view(team, reveal_code=team.leader_id == self.request.user.pk)
        return JsonResponse(serialize_team(view), status=status)


class TeamCreateView(TeamJSONView):
    """Create a team led by the current user."""

    def post(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        """Create a team from ``{"teamName", "teamSize", "inviteEmails", "formResponses"}``."""
        payload = self.read_json()
        team = TeamService.create_team(
            event_id,
            request.user.pk,
            payload.get("teamName"),
            payload.get("teamSize"),
            payload.get("inviteEmails"),
            payload.get("formResponses"),
        )
        return self.render_team(team, status=201)


class MyTeamView(FestJSONView):
    """The current user's team for an event."""

    def get(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        view = TeamService.get_my_team(event_id, request.user.pk)
        return JsonResponse({"team": serialize_team(view) if view is not None else None})


class TeamJoinView(TeamJSONView):
    """Join a team with ``{"inviteCode"}``."""

    def post(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        payload = self.read_json()
        team = TeamService.join_by_code(event_id, request.user.pk, payload.get("inviteCode"))
        return self.render_team(team)


class TeamRejectView(TeamJSONView):
    """Decline a team invite, optionally naming it with ``{"inviteCode"}``."""

    def post(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        payload = self.read_json()
        team = TeamService.reject_by_code(event_id, request.user.pk, payload.get("inviteCode"))
        return self.render_team(team)


class OrganizerTeamsView(FestJSONView):
    """All teams of an event, for its organizer."""

    def get(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        views = TeamService.list_event_teams(request.user.pk, event_id)
        return JsonResponse({"teams": [serialize_team(view) for view in views]})

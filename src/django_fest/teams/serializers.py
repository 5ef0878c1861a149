"""JSON representations of teams."""

from typing import Any

from django_fest.teams.services.formation import TeamView
from django_fest.views import isoformat


def _person(user: Any) -> dict[str, Any]:
    return {
        "userId": user.pk,
        "name": user.get_full_name() or user.get_username(),
        "email": user.email,
    }


def serialize_team(view: TeamView) -> dict[str, Any]:
    """Return a team with its members and invites.

    ``inviteCode`` is omitted when the viewer may not see it.
    """
    team = view.team
    data: dict[str, Any] = {
        "teamId": team.pk,
        "eventId": team.event_id,
        "teamName": team.team_name,
        "teamSize": team.team_size,
        "status": team.status,
        "memberCount": view.accepted_count,
        "leader": _person(team.leader),
        "members": [
            {**_person(member.user), "status": member.status, "joinedAt": isoformat(member.joined_at)}
            for member in view.members
        ],
        "invites": [
            {"email": invite.email, "status": invite.status, "respondedAt": isoformat(invite.responded_at)}
            for invite in view.invites
        ],
        "formResponses": team.form_responses,
        "createdAt": isoformat(team.created_at),
        "completedAt": isoformat(team.completed_at),
    }
    if view.invite_code is not None:
        data["inviteCode"] = view.invite_code
    return data

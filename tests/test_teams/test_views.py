"""Tests for the team JSON views."""

from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.test import Client
from django.urls import reverse
from django.utils import timezone

from django_fest.accounts.models import Profile
from django_fest.events.models import Event, Organizer
from django_fest.teams.models import TeamRegistration
from django_fest.teams.services.formation import TeamService

User = get_user_model()

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def organizer(db):
    account = User.objects.create_user(username="club", email="club@example.com")
    Profile.objects.create(user=account, role=Profile.Role.ORGANIZER)
    return Organizer.objects.create(account=account, name="Club", contact_email="club@example.com")


@pytest.fixture
def event(organizer):
    return Event.objects.create(
        organizer=organizer,
        name="Hackathon",
        status=Event.Status.PUBLISHED,
        registration_deadline=timezone.now() + timedelta(days=3),
        is_team_event=True,
        min_team_size=2,
        max_team_size=3,
    )


@pytest.fixture
def leader(db):
    return User.objects.create_user(username="lead", email="lead@example.com", first_name="Lee")


@pytest.fixture
def bob(db):
    return User.objects.create_user(username="bob", email="bob@example.com")


@pytest.fixture
def leader_client(leader):
    client = Client()
    client.force_login(leader)
    return client


@pytest.fixture
def bob_client(bob):
    client = Client()
    client.force_login(bob)
    return client


@pytest.fixture
def team(event, leader, bob):
    return TeamService.create_team(event.pk, leader.pk, "Owls", 2, ["bob@example.com"])


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@pytest.mark.django_db
class TestTeamCreateView:
    def test_anonymous_gets_401(self, event):
        response = Client().post(reverse("teams:create", args=[event.pk]), {}, content_type="application/json")

        assert response.status_code == 401
        assert response.json() == {"detail": "Authentication required"}

    def test_creates_team_and_reveals_code(self, event, leader_client, bob):
        response = leader_client.post(
            reverse("teams:create", args=[event.pk]),
            {"teamName": "Owls", "teamSize": 2, "inviteEmails": ["bob@example.com"]},
            content_type="application/json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["teamName"] == "Owls"
        assert data["status"] == "pending"
        assert data["memberCount"] == 1
        assert data["leader"]["name"] == "Lee"
        assert data["invites"][0]["email"] == "bob@example.com"
        assert data["inviteCode"] == TeamRegistration.objects.get().invite_code

    def test_service_error_maps_to_status(self, event, leader_client):
        response = leader_client.post(
            reverse("teams:create", args=[event.pk]),
            {"teamName": "Owls", "teamSize": 9},
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "teamSize must be between 2 and 3"}

    def test_malformed_body(self, event, leader_client):
        response = leader_client.post(
            reverse("teams:create", args=[event.pk]),
            "not json",
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Request body must be valid JSON"}


@pytest.mark.django_db
class TestMyTeamView:
    def test_leader_sees_code(self, event, team, leader_client):
        response = leader_client.get(reverse("teams:my-team", args=[event.pk]))

        assert response.status_code == 200
        assert response.json()["team"]["inviteCode"] == team.invite_code

    def test_invitee_does_not_see_code(self, event, team, bob_client):
        response = bob_client.get(reverse("teams:my-team", args=[event.pk]))

        data = response.json()["team"]
        assert data["teamId"] == team.pk
        assert "inviteCode" not in data

    def test_no_team(self, event, bob_client):
        response = bob_client.get(reverse("teams:my-team", args=[event.pk]))

        assert response.json() == {"team": None}


@pytest.mark.django_db
class TestJoinAndRejectViews:
    def test_join_completes_team_without_revealing_code(self, event, team, bob_client):
        response = bob_client.post(
            reverse("teams:join", args=[event.pk]),
            {"inviteCode": team.invite_code},
            content_type="application/json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["completedAt"] is not None
        assert "inviteCode" not in data

    def test_join_with_bad_code(self, event, team, bob_client):
        response = bob_client.post(
            reverse("teams:join", args=[event.pk]),
            {"inviteCode": "NOPE"},
            content_type="application/json",
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "Invalid or expired invite code"}

    def test_reject_without_code(self, event, team, bob_client):
        response = bob_client.post(reverse("teams:reject", args=[event.pk]), content_type="application/json")

        assert response.status_code == 200
        assert response.json()["invites"][0]["status"] == "rejected"


@pytest.mark.django_db
class TestOrganizerTeamsView:
    def test_owner_lists_teams_with_codes(self, event, team, organizer):
        client = Client()
        client.force_login(organizer.account)

        response = client.get(reverse("teams:organizer-teams", args=[event.pk]))

        assert response.status_code == 200
        teams = response.json()["teams"]
        assert [t["teamId"] for t in teams] == [team.pk]
        assert teams[0]["inviteCode"] == team.invite_code

    def test_participant_is_not_an_organizer(self, event, team, bob_client):
        response = bob_client.get(reverse("teams:organizer-teams", args=[event.pk]))

        assert response.status_code == 404
        assert response.json() == {"detail": "Organizer profile not found"}

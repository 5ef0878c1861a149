"""Tests for TeamService: creating, joining, rejecting, and completing teams."""

import re
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from django_fest.accounts.models import Profile
from django_fest.events.models import Event, Organizer
from django_fest.exceptions import (
    CapacityError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TransientCreationFailure,
    ValidationError,
)
from django_fest.registration.models import Registration
from django_fest.teams.models import TeamInvite, TeamMember, TeamRegistration
from django_fest.teams.serializers import serialize_team
from django_fest.teams.services.formation import TeamService, team_size_bounds
from django_fest.teams.signals import team_completed

User = get_user_model()

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _participant(username, participant_type=Profile.ParticipantType.IIIT):
    user = User.objects.create_user(username=username, email=f"{username}@example.com")
    Profile.objects.create(user=user, participant_type=participant_type)
    return user


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
        max_team_size=4,
    )


@pytest.fixture
def leader(db):
    return _participant("lead")


@pytest.fixture
def bob(db):
    return _participant("bob")


@pytest.fixture
def cara(db):
    return _participant("cara")


@pytest.fixture
def invited_team(event, leader, bob, cara):
    return TeamService.create_team(event.pk, leader.pk, "Owls", 3, ["bob@example.com", "CARA@example.com"])


@pytest.fixture
def open_team(event, leader):
    return TeamService.create_team(event.pk, leader.pk, "Open Owls", 2)


def _fill_event(event, count):
    for idx in range(count):
        Registration.objects.create(event=event, user=_participant(f"filler{idx}"))
    Event.objects.filter(pk=event.pk).update(registration_count=count)


# ---------------------------------------------------------------------------
# create_team
# ---------------------------------------------------------------------------


@pytest.mark.django_db
class TestCreateTeam:
    def test_creates_pending_team_with_leader_and_invites(self, invited_team, leader, bob, cara):
        assert invited_team.status == TeamRegistration.Status.PENDING
        assert invited_team.team_size == 3
        assert re.fullmatch(r"[0-9A-F]{8}", invited_team.invite_code)

        members = list(invited_team.members.all())
        assert [m.user_id for m in members] == [leader.pk]
        assert members[0].status == TeamMember.Status.ACCEPTED

        invites = {i.email: i for i in invited_team.invites.all()}
        assert set(invites) == {"bob@example.com", "cara@example.com"}
        assert invites["cara@example.com"].user_id == cara.pk
        assert all(i.status == TeamInvite.Status.PENDING for i in invites.values())

    def test_leader_email_and_duplicates_are_dropped_from_invites(self, event, leader, bob):
        team = TeamService.create_team(
            event.pk,
            leader.pk,
            "Owls",
            2,
            ["lead@example.com", "bob@example.com", " Bob@Example.com "],
        )

        assert list(team.invites.values_list("email", flat=True)) == ["bob@example.com"]

    def test_registration_count_is_untouched(self, event, invited_team):
        event.refresh_from_db()
        assert event.registration_count == 0
        assert not Registration.objects.exists()

    def test_non_team_event(self, event, leader):
        event.is_team_event = False
        event.save()

        with pytest.raises(ValidationError, match="does not support team registration"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2)

    def test_deadline_passed(self, event, leader):
        event.registration_deadline = timezone.now() - timedelta(hours=1)
        event.save()

        with pytest.raises(ValidationError, match="Registration deadline has passed"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2)

    def test_organizer_cannot_lead(self, event, organizer):
        with pytest.raises(NotFoundError, match="Participant not found"):
            TeamService.create_team(event.pk, organizer.account_id, "Owls", 2)

    def test_ineligible_leader(self, event):
        event.eligibility = Event.Eligibility.IIIT_ONLY
        event.save()
        outsider = _participant("outsider", Profile.ParticipantType.NON_IIIT)

        with pytest.raises(ValidationError, match="not eligible"):
            TeamService.create_team(event.pk, outsider.pk, "Owls", 2)

    def test_leader_already_in_pending_team(self, event, leader, open_team):
        with pytest.raises(ConflictError, match="already belong to another team"):
            TeamService.create_team(event.pk, leader.pk, "Second", 2)

    def test_blank_team_name(self, event, leader):
        with pytest.raises(ValidationError, match="teamName is required"):
            TeamService.create_team(event.pk, leader.pk, "   ", 2)

    @pytest.mark.parametrize("size", [1, 5, "many", True])
    def test_team_size_outside_bounds(self, event, leader, size):
        with pytest.raises(ValidationError, match="teamSize"):
            TeamService.create_team(event.pk, leader.pk, "Owls", size)

    def test_team_larger_than_remaining_capacity(self, event, leader):
        event.registration_limit = 3
        event.registration_count = 2
        event.save()

        with pytest.raises(CapacityError):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2)

    def test_invite_list_longer_than_team(self, event, leader, bob, cara):
        with pytest.raises(ValidationError, match="Invite list cannot exceed team size"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2, ["bob@example.com", "cara@example.com"])

    def test_unknown_invitee(self, event, leader, bob):
        with pytest.raises(ValidationError, match="Invalid participant emails: ghost@example.com"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 3, ["bob@example.com", "ghost@example.com"])

        assert not TeamRegistration.objects.exists()

    def test_organizer_cannot_be_invited(self, event, leader, organizer):
        with pytest.raises(ValidationError, match="Invalid participant emails: club@example.com"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2, ["club@example.com"])

    def test_invitee_already_in_pending_team(self, event, leader, bob):
        TeamService.create_team(event.pk, bob.pk, "Other", 2)

        with pytest.raises(ConflictError, match="invited users already belong to another team"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2, ["bob@example.com"])

    def test_invitee_already_registered(self, event, leader, bob):
        Registration.objects.create(event=event, user=bob)

        with pytest.raises(ConflictError, match="invited users are already registered"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2, ["bob@example.com"])

    def test_form_responses_validated_against_schema(self, event, leader):
        event.form_schema = [{"label": "Track", "fieldType": "dropdown", "required": True}]
        event.save()

        with pytest.raises(ValidationError, match="Missing required form field: Track"):
            TeamService.create_team(event.pk, leader.pk, "Owls", 2)

        team = TeamService.create_team(event.pk, leader.pk, "Owls", 2, None, [{"question": "Track", "answer": "AI"}])
        assert team.form_responses == [{"question": "Track", "answer": "AI"}]

    def test_invite_code_collision_is_retried(self, event, leader, bob, open_team):
        taken = open_team.invite_code
        with patch(
            "django_fest.teams.services.formation._generate_invite_code",
            side_effect=[taken, "FRESH001"],
        ):
            team = TeamService.create_team(event.pk, bob.pk, "Late", 2)

        assert team.invite_code == "FRESH001"

    def test_invite_code_attempts_are_bounded(self, event, bob, open_team):
        with (
            patch("django_fest.teams.services.formation._generate_invite_code", return_value=open_team.invite_code),
            pytest.raises(TransientCreationFailure, match="Could not generate invite code"),
        ):
            TeamService.create_team(event.pk, bob.pk, "Late", 2)

        assert TeamRegistration.objects.count() == 1


# ---------------------------------------------------------------------------
# join_by_code
# ---------------------------------------------------------------------------


@pytest.mark.django_db
class TestJoinByCode:
    def test_invitee_joins_and_team_stays_pending(self, event, invited_team, bob):
        team = TeamService.join_by_code(event.pk, bob.pk, invited_team.invite_code.lower())

        assert team.status == TeamRegistration.Status.PENDING
        assert team.accepted_count == 2
        invite = team.invites.get(email="bob@example.com")
        assert invite.status == TeamInvite.Status.ACCEPTED
        assert invite.responded_at is not None

    def test_last_invitee_completes_team(self, event, invited_team, leader, bob, cara):
        TeamService.join_by_code(event.pk, bob.pk, invited_team.invite_code)
        team = TeamService.join_by_code(event.pk, cara.pk, invited_team.invite_code)

        assert team.status == TeamRegistration.Status.COMPLETED
        assert team.completed_at is not None
        registrations = Registration.objects.filter(event=event)
        assert {r.user_id for r in registrations} == {leader.pk, bob.pk, cara.pk}
        for registration in registrations:
            assert registration.source == Registration.Source.TEAM
            assert registration.team_name == "Owls"
            assert registration.ticket_id.startswith("TKT-")
            assert registration.user_id not in registration.team_member_ids
            assert len(registration.team_member_ids) == 2
        event.refresh_from_db()
        assert event.registration_count == 3

    def test_open_team_completes_on_first_join(self, event, open_team, bob):
        team = TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        assert team.status == TeamRegistration.Status.COMPLETED

    def test_completed_team_code_is_no_longer_valid(self, event, open_team, bob, cara):
        TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        with pytest.raises(NotFoundError, match="Invalid or expired invite code"):
            TeamService.join_by_code(event.pk, cara.pk, open_team.invite_code)

    def test_blank_code(self, event, bob):
        with pytest.raises(ValidationError, match="inviteCode is required"):
            TeamService.join_by_code(event.pk, bob.pk, "  ")

    def test_unknown_code(self, event, bob):
        with pytest.raises(NotFoundError, match="Invalid or expired invite code"):
            TeamService.join_by_code(event.pk, bob.pk, "DEADBEEF")

    def test_leader_cannot_rejoin(self, event, open_team, leader):
        with pytest.raises(ValidationError, match="already part of this team"):
            TeamService.join_by_code(event.pk, leader.pk, open_team.invite_code)

    def test_member_of_another_pending_team(self, event, open_team, bob):
        TeamService.create_team(event.pk, bob.pk, "Mine", 2)

        with pytest.raises(ConflictError, match="already belong to another team"):
            TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

    def test_uninvited_user_on_invite_only_team(self, event, invited_team):
        stranger = _participant("stranger")

        with pytest.raises(ForbiddenError, match="not invited to this team"):
            TeamService.join_by_code(event.pk, stranger.pk, invited_team.invite_code)

    def test_rejected_invitee_cannot_join(self, event, invited_team, bob):
        TeamService.reject_by_code(event.pk, bob.pk, invited_team.invite_code)

        with pytest.raises(ValidationError, match="rejected this invite already"):
            TeamService.join_by_code(event.pk, bob.pk, invited_team.invite_code)

    def test_already_registered_user(self, event, open_team, bob):
        Registration.objects.create(event=event, user=bob)

        with pytest.raises(ConflictError, match="already registered for this event"):
            TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

    def test_full_team_rejects_second_joiner(self, event, open_team, bob, cara):
        event.registration_limit = 1
        event.save()

        team = TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)
        assert team.status == TeamRegistration.Status.PENDING

        with pytest.raises(ConflictError, match="Team is already full"):
            TeamService.join_by_code(event.pk, cara.pk, open_team.invite_code)


# ---------------------------------------------------------------------------
# reject_by_code
# ---------------------------------------------------------------------------


@pytest.mark.django_db
class TestRejectByCode:
    def test_reject_by_code(self, event, invited_team, bob):
        team = TeamService.reject_by_code(event.pk, bob.pk, invited_team.invite_code)

        assert team.status == TeamRegistration.Status.PENDING
        assert team.invites.get(email="bob@example.com").status == TeamInvite.Status.REJECTED

    def test_reject_by_email_lookup(self, event, invited_team, cara):
        TeamService.reject_by_code(event.pk, cara.pk)

        assert invited_team.invites.get(email="cara@example.com").status == TeamInvite.Status.REJECTED

    def test_no_pending_invite(self, event, bob):
        with pytest.raises(NotFoundError, match="No pending invite found for this event"):
            TeamService.reject_by_code(event.pk, bob.pk)

    def test_not_invited_to_code(self, event, invited_team):
        stranger = _participant("stranger")

        with pytest.raises(NotFoundError, match="No invite found for this participant"):
            TeamService.reject_by_code(event.pk, stranger.pk, invited_team.invite_code)

    def test_accepted_invite_cannot_be_rejected(self, event, invited_team, bob):
        TeamService.join_by_code(event.pk, bob.pk, invited_team.invite_code)

        with pytest.raises(ValidationError, match="Invite has already been accepted"):
            TeamService.reject_by_code(event.pk, bob.pk, invited_team.invite_code)

    def test_rejection_strands_team_pending(self, event, invited_team, bob, cara):
        TeamService.join_by_code(event.pk, bob.pk, invited_team.invite_code)
        team = TeamService.reject_by_code(event.pk, cara.pk, invited_team.invite_code)

        assert team.status == TeamRegistration.Status.PENDING
        assert team.accepted_count == 2
        assert not team.has_pending_invites
        assert TeamService.finalize_if_complete(team.pk).status == TeamRegistration.Status.PENDING
        assert not Registration.objects.exists()

    def test_rejection_completes_team_when_seats_are_filled(self, event, leader, bob, cara):
        team = TeamService.create_team(event.pk, leader.pk, "Pair", 2, ["bob@example.com"])
        TeamInvite.objects.create(team=team, email="cara@example.com", user=cara)
        TeamService.join_by_code(event.pk, bob.pk, team.invite_code)

        team = TeamService.reject_by_code(event.pk, cara.pk, team.invite_code)

        assert team.status == TeamRegistration.Status.COMPLETED


# ---------------------------------------------------------------------------
# finalize_if_complete
# ---------------------------------------------------------------------------


@pytest.mark.django_db
class TestFinalize:
    def test_not_ready_team_is_returned_unchanged(self, invited_team):
        team = TeamService.finalize_if_complete(invited_team.pk)

        assert team.status == TeamRegistration.Status.PENDING

    def test_missing_team(self, db):
        assert TeamService.finalize_if_complete(999_999) is None

    def test_second_finalize_is_a_no_op(self, event, open_team, bob):
        TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        team = TeamService.finalize_if_complete(open_team.pk)

        assert team.status == TeamRegistration.Status.COMPLETED
        assert Registration.objects.filter(event=event).count() == 2
        assert not TeamService._claim_completion(open_team.pk)

    def test_losing_completion_claim_writes_no_registrations(self, event, open_team, bob):
        def competing_claim(team_id):
            TeamRegistration.objects.filter(pk=team_id).update(
                status=TeamRegistration.Status.COMPLETED,
                completed_at=timezone.now(),
            )
            return False

        with patch.object(TeamService, "_claim_completion", side_effect=competing_claim):
            team = TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        assert team.status == TeamRegistration.Status.COMPLETED
        assert not Registration.objects.filter(event=event).exists()
        event.refresh_from_db()
        assert event.registration_count == 0

    def test_invitees_racing_for_last_seat(self, event, leader, bob, cara):
        team = TeamService.create_team(event.pk, leader.pk, "Pair", 2, ["bob@example.com"])
        TeamInvite.objects.create(team=team, email="cara@example.com", user=cara)

        TeamService.join_by_code(event.pk, bob.pk, team.invite_code)

        with pytest.raises(ConflictError, match="Team is already full"):
            TeamService.join_by_code(event.pk, cara.pk, team.invite_code)
        assert team.accepted_count == 2
        assert team.invites.get(email="cara@example.com").status == TeamInvite.Status.PENDING

    def test_completed_team_rejects_no_further_responses(self, event, leader, bob):
        team = TeamService.create_team(event.pk, leader.pk, "Pair", 2, ["bob@example.com"])
        TeamService.join_by_code(event.pk, bob.pk, team.invite_code)
        stranger = _participant("stranger")

        with pytest.raises(NotFoundError, match="Invalid or expired invite code"):
            TeamService.reject_by_code(event.pk, stranger.pk, team.invite_code)

        team.refresh_from_db()
        assert team.status == TeamRegistration.Status.COMPLETED
        assert list(team.invites.values_list("email", "status")) == [("bob@example.com", TeamInvite.Status.ACCEPTED)]

    def test_capacity_shortfall_keeps_team_pending(self, event, open_team, bob):
        event.registration_limit = 10
        event.save()
        _fill_event(event, 9)

        team = TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        assert team.status == TeamRegistration.Status.PENDING
        assert not Registration.objects.filter(user__in=[open_team.leader_id, bob.pk]).exists()
        event.refresh_from_db()
        assert event.registration_count == 9

    def test_finalize_raises_capacity_error_directly(self, event, open_team, bob):
        event.registration_limit = 1
        event.save()
        TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        with pytest.raises(CapacityError):
            TeamService.finalize_if_complete(open_team.pk)

    def test_capacity_uses_fresh_count(self, event, open_team, bob):
        event.registration_limit = 2
        event.save()
        # A stale cached counter must not block completion.
        Event.objects.filter(pk=event.pk).update(registration_count=2)

        team = TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)

        assert team.status == TeamRegistration.Status.COMPLETED
        event.refresh_from_db()
        assert event.registration_count == 2

    def test_sends_team_completed_after_commit(self, event, open_team, bob, django_capture_on_commit_callbacks):
        received = []

        def handler(sender, team, registrations, **kwargs):
            received.append((team.pk, len(registrations)))

        team_completed.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                TeamService.join_by_code(event.pk, bob.pk, open_team.invite_code)
        finally:
            team_completed.disconnect(handler)

        assert received == [(open_team.pk, 2)]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.django_db
class TestReads:
    def test_leader_sees_invite_code(self, event, invited_team, leader):
        view = TeamService.get_my_team(event.pk, leader.pk)

        assert view.team == invited_team
        assert view.invite_code == invited_team.invite_code
        assert view.accepted_count == 1
        assert len(view.invites) == 2

    def test_invitee_sees_team_without_code(self, event, invited_team, cara):
        view = TeamService.get_my_team(event.pk, cara.pk)

        assert view.team == invited_team
        assert view.invite_code is None

    def test_stranger_has_no_team(self, event, invited_team):
        stranger = _participant("stranger")

        assert TeamService.get_my_team(event.pk, stranger.pk) is None

    def test_my_team_for_missing_event(self, leader):
        with pytest.raises(NotFoundError, match="Event not found"):
            TeamService.get_my_team(424_242, leader.pk)

    def test_my_team_for_individual_event(self, event, invited_team, leader):
        event.is_team_event = False
        event.save()

        with pytest.raises(ValidationError, match="This event does not support team registration"):
            TeamService.get_my_team(event.pk, leader.pk)

    def test_list_event_teams_query_count_is_flat(
        self, event, organizer, invited_team, bob, django_assert_max_num_queries
    ):
        TeamService.join_by_code(event.pk, bob.pk, invited_team.invite_code)
        for name in ("dev", "eli", "fay"):
            TeamService.create_team(event.pk, _participant(name).pk, f"Team {name}", 2)

        # organizer, event, teams with leaders, members with users, invites
        with django_assert_max_num_queries(5):
            data = [serialize_team(v) for v in TeamService.list_event_teams(organizer.account_id, event.pk)]

        assert len(data) == 4
        assert sum(len(team["members"]) for team in data) == 5

    def test_list_event_teams_for_owner(self, event, organizer, invited_team, bob):
        second = TeamService.create_team(event.pk, bob.pk, "Bobcats", 2)

        views = TeamService.list_event_teams(organizer.account_id, event.pk)

        assert {v.team for v in views} == {invited_team, second}
        assert {v.invite_code for v in views} == {invited_team.invite_code, second.invite_code}

    def test_list_event_teams_for_other_organizer(self, event, invited_team):
        account = User.objects.create_user(username="rival", email="rival@example.com")
        Organizer.objects.create(account=account, name="Rival", contact_email="rival@example.com")

        with pytest.raises(ForbiddenError):
            TeamService.list_event_teams(account.pk, event.pk)

    def test_list_event_teams_for_individual_event(self, event, organizer):
        event.is_team_event = False
        event.save()

        assert TeamService.list_event_teams(organizer.account_id, event.pk) == []

    def test_team_size_bounds_fall_back_to_config(self, event, settings):
        settings.DJANGO_FEST = {"teams": {"default_min_size": 3, "default_max_size": 6}}
        event.min_team_size = None
        event.max_team_size = None

        assert team_size_bounds(event) == (3, 6)

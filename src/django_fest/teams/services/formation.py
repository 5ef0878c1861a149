"""Team formation service.

Leaders create a pending team with a declared size and an optional invite
list; invitees join with the team's invite code or decline. Every join or
rejection opportunistically tries to finalize the team: once all seats are
accepted and no invite is pending, the team flips to ``completed`` through a
conditional update and each accepted member receives a registration.

Membership changes for an event are serialized on the event row lock. The
completion write is a compare-and-swap on ``status`` so concurrent finalize
attempts register members exactly once.
"""

import logging
import secrets
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Prefetch, Q, prefetch_related_objects
from django.db.models.functions import Lower
from django.utils import timezone

from django_fest.accounts.identity import Identity, get_identity, is_eligible
from django_fest.accounts.models import Profile
from django_fest.events.models import Event
from django_fest.events.services import get_event, get_owned_event
from django_fest.exceptions import (
    CapacityError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TransientCreationFailure,
    ValidationError,
)
from django_fest.registration.form_schema import validate_form_responses
from django_fest.registration.models import Registration
from django_fest.registration.services.capacity import check_capacity, lock_event, resync
from django_fest.registration.services.registration import RegistrationService
from django_fest.registration.tickets import get_ticket_issuer
from django_fest.settings import get_config
from django_fest.teams.models import TeamInvite, TeamMember, TeamRegistration
from django_fest.teams.signals import team_completed

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TeamView:
    """A team with its members and invites, as shown to one viewer.

    ``invite_code`` is ``None`` unless the viewer may see it (the leader, or
    the organizer of the event).
    """

    team: TeamRegistration
    members: list[TeamMember]
    invites: list[TeamInvite]
    invite_code: str | None

    @property
    def accepted_count(self) -> int:
        return sum(1 for m in self.members if m.status == TeamMember.Status.ACCEPTED)


TEAM_DETAILS = (Prefetch("members", queryset=TeamMember.objects.select_related("user")), "invites")


def build_team_view(team: TeamRegistration, *, reveal_code: bool) -> TeamView:
    """Collect a team's members and invites for display.

    Lookups already prefetched with TEAM_DETAILS are reused.
    """
    prefetch_related_objects([team], *TEAM_DETAILS)
    return TeamView(
        team=team,
        members=list(team.members.all()),
        invites=list(team.invites.all()),
        invite_code=team.invite_code if reveal_code else None,
    )


def team_size_bounds(event: Event) -> tuple[int, int]:
    """Return the ``(min, max)`` team size for an event.

    Sizes left unset on the event fall back to the configured defaults.
    """
    config = get_config().teams
    return (
        event.min_team_size or config.default_min_size,
        event.max_team_size or config.default_max_size,
    )


def _generate_invite_code() -> str:
    return secrets.token_hex(get_config().teams.invite_code_bytes).upper()


def _ensure_team_event_open(event: Event) -> None:
    if not event.is_team_event:
        raise ValidationError("This event does not support team registration")
    if event.status != Event.Status.PUBLISHED:
        raise ValidationError("Event is not open for registration")
    if not event.registration_open:
        raise ValidationError("Registrations are closed for this event")
    if event.deadline_passed:
        raise ValidationError("Registration deadline has passed")


def _get_participant(event: Event, user_id: int) -> Identity:
    """Resolve a participant who may take part in *event*'s team workflow."""
    identity = get_identity(user_id)
    if not identity.is_participant:
        raise NotFoundError("Participant not found")
    if not is_eligible(identity, event.eligibility):
        raise ValidationError("You are not eligible for this event")
    if Registration.objects.filter(event_id=event.pk, user_id=user_id).exists():
        raise ConflictError("You are already registered for this event")
    return identity


def _pending_memberships(event_id: int, user_ids: Iterable[int]):
    return TeamMember.objects.filter(
        team__event_id=event_id,
        team__status=TeamRegistration.Status.PENDING,
        status=TeamMember.Status.ACCEPTED,
        user_id__in=list(user_ids),
    )


def _normalize_emails(raw: Any, *, exclude: str = "") -> list[str]:
    """Trim, lowercase and dedupe invite e-mails, preserving order."""
    if not isinstance(raw, list | tuple):
        return []
    emails: list[str] = []
    for value in raw:
        email = str(value or "").strip().lower()
        if email and email != exclude and email not in emails:
            emails.append(email)
    return emails


def _resolve_participants(emails: list[str]) -> dict[str, int]:
    """Map each e-mail to the id of a participant account holding it."""
    if not emails:
        return {}
    users = (
        get_user_model()
        .objects.annotate(email_lower=Lower("email"))
        .filter(email_lower__in=emails)
        .exclude(fest_profile__role__in=[Profile.Role.ADMIN, Profile.Role.ORGANIZER])
        .order_by("pk")
        .values_list("email_lower", "pk")
    )
    resolved: dict[str, int] = {}
    for email, pk in users:
        resolved.setdefault(email, pk)
    return resolved


def _parse_team_size(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("teamSize must be a valid number")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("teamSize must be a valid number") from None


class TeamService:
    """Stateless service for team registration workflows."""

    @staticmethod
    def create_team(
        event_id: int,
        leader_id: int,
        team_name: str,
        team_size: Any,
        invite_emails: Any = None,
        form_responses: Any = None,
    ) -> TeamRegistration:
        """Create a pending team led by *leader_id*.

        The leader is seeded as the first accepted member and every invitee
        as a pending invite. Nothing is written unless all checks pass.

        Args:
            event_id: The team event.
            leader_id: The creating participant.
            team_name: Display name of the team.
            team_size: Declared number of seats, leader included.
            invite_emails: E-mails of participants to invite.
            form_responses: Answers to the event's registration form.

        Returns:
            The new pending TeamRegistration.

        Raises:
            NotFoundError: If the event or leader does not exist.
            ValidationError: On a closed or non-team event, bad input,
                ineligibility, unknown invitees, or a missing form answer.
            ConflictError: If the leader or an invitee is already registered
                or already in a pending team for this event.
            CapacityError: If the declared size does not fit the event.
            TransientCreationFailure: If no unique invite code was found.
        """
        config = get_config().teams
        with transaction.atomic():
            event = lock_event(event_id)
            _ensure_team_event_open(event)

            leader = _get_participant(event, leader_id)
            if _pending_memberships(event.pk, [leader_id]).exists():
                raise ConflictError("You already belong to another team for this event")

            name = str(team_name or "").strip()
            if not name:
                raise ValidationError("teamName is required")
            size = _parse_team_size(team_size)
            min_size, max_size = team_size_bounds(event)
            if not min_size <= size <= max_size:
                raise ValidationError(f"teamSize must be between {min_size} and {max_size}")
            if not check_capacity(event, size):
                raise CapacityError

            emails = _normalize_emails(invite_emails, exclude=leader.normalized_email)
            if len(emails) > size - 1:
                raise ValidationError("Invite list cannot exceed team size")
            invitees = _resolve_participants(emails)
            unknown = [email for email in emails if email not in invitees]
            if unknown:
                raise ValidationError(f"Invalid participant emails: {', '.join(unknown)}")
            if _pending_memberships(event.pk, invitees.values()).exists():
                raise ConflictError("One or more invited users already belong to another team for this event")
            if Registration.objects.filter(event_id=event.pk, user_id__in=invitees.values()).exists():
                raise ConflictError("One or more invited users are already registered for this event")

            responses = validate_form_responses(event.form_schema, form_responses) if event.form_schema else []

            for _ in range(config.invite_code_attempts):
                code = _generate_invite_code()
                try:
                    with transaction.atomic():
                        team = TeamRegistration.objects.create(
                            event=event,
                            leader_id=leader_id,
                            team_name=name,
                            team_size=size,
                            invite_code=code,
                            form_responses=responses,
                        )
                    break
                except IntegrityError:
                    if TeamRegistration.objects.filter(invite_code=code).exists():
                        continue
                    raise
            else:
                raise TransientCreationFailure("Could not generate invite code. Please try again")

            TeamMember.objects.create(team=team, user_id=leader_id, joined_at=timezone.now())
            TeamInvite.objects.bulk_create(
                [TeamInvite(team=team, email=email, user_id=invitees[email]) for email in emails]
            )

        logger.info(
            "Created team %s (%s) for event %s: size %s, %s invite(s)",
            team.pk,
            name,
            event.pk,
            size,
            len(emails),
        )
        return team

    @staticmethod
    def get_my_team(event_id: int, user_id: int) -> TeamView | None:
        """Return the caller's most recent team for an event.

        A team matches if the caller is a member or was invited by e-mail.
        The invite code is only revealed to the team's leader.

        Raises:
            NotFoundError: If the event or user does not exist.
            ValidationError: If the event does not support team registration.
        """
        event = get_event(event_id)
        if not event.is_team_event:
            raise ValidationError("This event does not support team registration")
        identity = get_identity(user_id)
        team = (
            TeamRegistration.objects.filter(event=event)
            .filter(Q(members__user_id=user_id) | Q(invites__email=identity.normalized_email))
            .select_related("leader", "event")
            .distinct()
            .order_by("-created_at")
            .first()
        )
        if team is None:
            return None
        return build_team_view(team, reveal_code=team.leader_id == user_id)

    @staticmethod
    def join_by_code(event_id: int, user_id: int, invite_code: str | None) -> TeamRegistration:
        """Accept a seat on the pending team identified by *invite_code*.

        Joining may complete the team. If completion is refused for lack of
        capacity, the team is returned still pending.

        Raises:
            NotFoundError: If the event, user or team does not exist.
            ValidationError: On a closed event, ineligibility, a blank code,
                re-joining the same team, or an already answered invite.
            ConflictError: If the user is registered, in another pending
                team, or the team is full.
            ForbiddenError: If the team is invite-only and the user was not
                invited.
        """
        with transaction.atomic():
            event = lock_event(event_id)
            _ensure_team_event_open(event)
            identity = _get_participant(event, user_id)

            code = str(invite_code or "").strip().upper()
            if not code:
                raise ValidationError("inviteCode is required")
            team = (
                TeamRegistration.objects.select_for_update()
                .filter(event_id=event.pk, invite_code=code, status=TeamRegistration.Status.PENDING)
                .first()
            )
            if team is None:
                raise NotFoundError("Invalid or expired invite code")

            if _pending_memberships(event.pk, [user_id]).exclude(team=team).exists():
                raise ConflictError("You already belong to another team for this event")
            if team.members.filter(user_id=user_id, status=TeamMember.Status.ACCEPTED).exists():
                raise ValidationError("You are already part of this team")
            if team.accepted_count >= team.team_size:
                raise ConflictError("Team is already full")

            invite = None
            if team.invites.exists():
                invite = team.invites.filter(email=identity.normalized_email).first()
                if invite is None:
                    raise ForbiddenError("You are not invited to this team")
                if invite.status == TeamInvite.Status.REJECTED:
                    raise ValidationError("You have rejected this invite already")
                if invite.status == TeamInvite.Status.ACCEPTED:
                    raise ValidationError("Invite has already been accepted")

            now = timezone.now()
            TeamMember.objects.update_or_create(
                team=team,
                user_id=user_id,
                defaults={"status": TeamMember.Status.ACCEPTED, "joined_at": now},
            )
            if invite is not None:
                invite.status = TeamInvite.Status.ACCEPTED
                invite.responded_at = now
                invite.user_id = user_id
                invite.save(update_fields=["status", "responded_at", "user"])

        logger.info("User %s joined team %s for event %s", user_id, team.pk, event.pk)
        return TeamService._try_finalize(team.pk)

    @staticmethod
    def reject_by_code(event_id: int, user_id: int, invite_code: str | None = None) -> TeamRegistration:
        """Decline an invite, found by invite code or by the caller's e-mail.

        Rejecting may complete the team when the remaining seats are already
        accepted.

        Raises:
            NotFoundError: If the event, user, team or invite does not exist.
            ValidationError: On a closed event, ineligibility, or an invite
                that was already answered.
            ConflictError: If the user is already registered for the event.
        """
        with transaction.atomic():
            event = lock_event(event_id)
            _ensure_team_event_open(event)
            identity = _get_participant(event, user_id)

            code = str(invite_code or "").strip().upper()
            if code:
                team = (
                    TeamRegistration.objects.select_for_update()
                    .filter(event_id=event.pk, invite_code=code, status=TeamRegistration.Status.PENDING)
                    .first()
                )
                if team is None:
                    raise NotFoundError("Invalid or expired invite code")
                invite = team.invites.filter(email=identity.normalized_email).first()
                if invite is None:
                    raise NotFoundError("No invite found for this participant")
            else:
                invite = (
                    TeamInvite.objects.select_related("team")
                    .filter(
                        team__event_id=event.pk,
                        team__status=TeamRegistration.Status.PENDING,
                        email=identity.normalized_email,
                        status=TeamInvite.Status.PENDING,
                    )
                    .order_by("-team__created_at")
                    .first()
                )
                if invite is None:
                    raise NotFoundError("No pending invite found for this event")
                team = invite.team

            if invite.status == TeamInvite.Status.ACCEPTED:
                raise ValidationError("Invite has already been accepted")
            if invite.status == TeamInvite.Status.REJECTED:
                raise ValidationError("You have rejected this invite already")

            invite.status = TeamInvite.Status.REJECTED
            invite.responded_at = timezone.now()
            invite.save(update_fields=["status", "responded_at"])

        logger.info("User %s rejected invite to team %s for event %s", user_id, team.pk, event.pk)
        return TeamService._try_finalize(team.pk)

    @staticmethod
    def finalize_if_complete(team_id: int) -> TeamRegistration | None:
        """Complete a team whose seats are all accepted and invites settled.

        Completion is claimed with a conditional update on ``status``; only
        the caller that flips ``pending`` to ``completed`` writes member
        registrations. Members who already hold a registration for the event
        keep it untouched.

        Args:
            team_id: The team to finalize.

        Returns:
            The team (completed, or unchanged if not ready), or ``None`` if
            it does not exist.

        Raises:
            CapacityError: If the event no longer has room for the members
                still needing a registration. The team stays pending.
        """
        with transaction.atomic():
            team = TeamRegistration.objects.filter(pk=team_id).first()
            if team is None or not team.is_pending:
                return team

            event = lock_event(team.event_id)
            member_ids = list(
                team.members.filter(status=TeamMember.Status.ACCEPTED).values_list("user_id", flat=True)
            )
            if len(member_ids) != team.team_size or team.has_pending_invites:
                return team

            already_registered = Registration.objects.filter(event_id=event.pk, user_id__in=member_ids).count()
            if not check_capacity(event, len(member_ids) - already_registered, recount=True):
                raise CapacityError

            if not TeamService._claim_completion(team.pk):
                team.refresh_from_db()
                return team

            issuer = get_ticket_issuer()
            created = []
            for member_id in member_ids:
                registration, was_created = RegistrationService.ensure_registration(
                    event,
                    member_id,
                    source=Registration.Source.TEAM,
                    team_name=team.team_name,
                    team_member_ids=member_ids,
                    form_responses=team.form_responses,
                    issuer=issuer,
                )
                if was_created:
                    created.append(registration)
            resync(event)
            team.refresh_from_db()
            transaction.on_commit(
                lambda: team_completed.send(sender=TeamRegistration, team=team, registrations=created)
            )

        logger.info(
            "Completed team %s for event %s: %s new registration(s)",
            team.pk,
            event.pk,
            len(created),
        )
        return team

    @staticmethod
    def list_event_teams(organizer_user_id: int, event_id: int) -> list[TeamView]:
        """Return every team of an event the organizer owns, newest first.

        Non-team events have no teams and yield an empty list.
        """
        event = get_owned_event(organizer_user_id, event_id)
        if not event.is_team_event:
            return []
        teams = event.teams.select_related("leader").prefetch_related(*TEAM_DETAILS).order_by("-created_at")
        return [build_team_view(team, reveal_code=True) for team in teams]

    @staticmethod
    def _claim_completion(team_id: int) -> bool:
        """Flip a team from pending to completed; False if it was not pending."""
        now = timezone.now()
        updated = TeamRegistration.objects.filter(pk=team_id, status=TeamRegistration.Status.PENDING).update(
            status=TeamRegistration.Status.COMPLETED,
            completed_at=now,
            updated_at=now,
        )
        return updated == 1

    @staticmethod
    def _try_finalize(team_id: int) -> TeamRegistration:
        try:
            team = TeamService.finalize_if_complete(team_id)
        except CapacityError:
            logger.warning("Team %s is ready but the event is out of seats; leaving it pending", team_id)
            team = None
        return team or TeamRegistration.objects.get(pk=team_id)

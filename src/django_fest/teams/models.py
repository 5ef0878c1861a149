"""Team formation models for django-fest."""

from django.conf import settings
from django.db import models


class TeamRegistration(models.Model):
    """A team being assembled by a leader for a team event.

    A team is ``pending`` while members join and invitees respond, and turns
    ``completed`` exactly once when every seat is accepted and no invite is
    still pending. Completed teams are never mutated again.
    """

    class Status(models.TextChoices):
        """Team lifecycle states."""

        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"

    event = models.ForeignKey(
        "fest_events.Event",
        on_delete=models.CASCADE,
        related_name="teams",
    )
    leader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="led_fest_teams",
    )
    team_name = models.CharField(max_length=200)
    team_size = models.PositiveSmallIntegerField()
    invite_code = models.CharField(max_length=32, unique=True)
    form_responses = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "leader"],
                condition=models.Q(status="pending"),
                name="fest_team_one_pending_per_leader",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="fest_team_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.team_name} ({self.event})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    @property
    def accepted_count(self) -> int:
        """Return the number of members currently holding a seat."""
        return self.members.filter(status=TeamMember.Status.ACCEPTED).count()

    @property
    def has_pending_invites(self) -> bool:
        return self.invites.filter(status=TeamInvite.Status.PENDING).exists()


class TeamMember(models.Model):
    """A user's seat on a team. The leader is seeded as the first member."""

    class Status(models.TextChoices):
        """Membership states."""

        ACCEPTED = "accepted", "Accepted"
        LEFT = "left", "Left"

    team = models.ForeignKey(
        TeamRegistration,
        on_delete=models.CASCADE,
        related_name="members",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="fest_team_memberships",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACCEPTED)
    joined_at = models.DateTimeField()

    class Meta:
        ordering = ["joined_at", "pk"]
        constraints = [
            models.UniqueConstraint(fields=["team", "user"], name="fest_teammember_team_user_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.user} in {self.team.team_name} ({self.status})"


class TeamInvite(models.Model):
    """An e-mail invitation to join a team.

    ``email`` is stored trimmed and lowercased. ``user`` is the participant
    account the address resolved to when the team was created.
    """

    class Status(models.TextChoices):
        """Invite response states."""

        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"

    team = models.ForeignKey(
        TeamRegistration,
        on_delete=models.CASCADE,
        related_name="invites",
    )
    email = models.EmailField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="fest_team_invites",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["pk"]
        constraints = [
            models.UniqueConstraint(fields=["team", "email"], name="fest_teaminvite_team_email_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.email} -> {self.team.team_name} ({self.status})"

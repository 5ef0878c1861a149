"""Registration model for django-fest."""

from django.conf import settings
from django.db import models


class Registration(models.Model):
    """A participant's confirmed seat at an event.

    At most one registration exists per (event, user), whichever path
    created it: individual sign-up, team completion, or merchandise approval.
    Apart from status transitions, rows are never rewritten after creation.
    """

    class Status(models.TextChoices):
        """Registration lifecycle states."""

        REGISTERED = "registered", "Registered"
        WAITLISTED = "waitlisted", "Waitlisted"
        CANCELLED = "cancelled", "Cancelled"
        ATTENDED = "attended", "Attended"

    class Source(models.TextChoices):
        """Which workflow created the registration."""

        INDIVIDUAL = "individual", "Individual"
        TEAM = "team", "Team"
        MERCH = "merch", "Merchandise order"

    event = models.ForeignKey(
        "fest_events.Event",
        on_delete=models.CASCADE,
        related_name="registrations",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="fest_registrations",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REGISTERED)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.INDIVIDUAL)
    team_name = models.CharField(max_length=200, blank=True, default="")
    team_member_ids = models.JSONField(
        default=list,
        blank=True,
        help_text="User ids of the other team members (excluding this user).",
    )
    form_responses = models.JSONField(default=list, blank=True)
    ticket_id = models.CharField(max_length=100, blank=True, default="", db_index=True)
    qr_code_url = models.CharField(max_length=2000, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="fest_registration_event_user_uniq"),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="fest_reg_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user} @ {self.event} ({self.status})"

    @property
    def is_active(self) -> bool:
        """Return True when the registration occupies a seat."""
        return self.status != self.Status.CANCELLED

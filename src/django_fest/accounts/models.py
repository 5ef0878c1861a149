"""Participant and staff profile model for django-fest."""

from django.conf import settings
from django.db import models


class Profile(models.Model):
    """Fest-specific account data attached to an auth user.

    The ``participant_type`` drives event eligibility. Users without a
    profile are treated as participants with no declared type.
    """

    class Role(models.TextChoices):
        """Account roles."""

        ADMIN = "admin", "Admin"
        ORGANIZER = "organizer", "Organizer"
        PARTICIPANT = "participant", "Participant"

    class ParticipantType(models.TextChoices):
        """Whether the participant belongs to the host institute."""

        IIIT = "IIIT", "IIIT"
        NON_IIIT = "Non-IIIT", "Non-IIIT"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="fest_profile",
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.PARTICIPANT)
    participant_type = models.CharField(
        max_length=20,
        choices=ParticipantType.choices,
        blank=True,
        default="",
    )
    college_or_org = models.CharField(max_length=200, blank=True, default="")
    contact_number = models.CharField(max_length=20, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user} ({self.role})"

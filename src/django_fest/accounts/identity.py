"""Read-only identity and eligibility lookups for registration flows."""

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist

from django_fest.accounts.models import Profile
from django_fest.exceptions import NotFoundError


@dataclass(frozen=True, slots=True)
class Identity:
    """The slice of a user account the registration engines rely on."""

    user_id: int
    email: str
    first_name: str
    role: str
    participant_type: str

    @property
    def is_participant(self) -> bool:
        return self.role == Profile.Role.PARTICIPANT

    @property
    def normalized_email(self) -> str:
        return self.email.strip().lower()


def get_identity(user_id: int) -> Identity:
    """Return the identity for *user_id*.

    Args:
        user_id: Primary key of the auth user.

    Returns:
        An :class:`Identity` snapshot.

    Raises:
        NotFoundError: If no such user exists.
    """
    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    try:
        profile = user.fest_profile
    except ObjectDoesNotExist:
        role, participant_type = Profile.Role.PARTICIPANT, ""
    else:
        role, participant_type = profile.role, profile.participant_type
    return Identity(
        user_id=user.pk,
        email=user.email or "",
        first_name=user.first_name or "",
        role=str(role),
        participant_type=str(participant_type),
    )


def is_eligible(identity: Identity, eligibility: str) -> bool:
    """Check the participant type against an event's eligibility policy.

    Args:
        identity: The participant.
        eligibility: One of ``all``, ``iiit_only`` or ``non_iiit_only``.
    """
    if eligibility == "iiit_only":
        return identity.participant_type == Profile.ParticipantType.IIIT
    if eligibility == "non_iiit_only":
        return identity.participant_type == Profile.ParticipantType.NON_IIIT
    return True

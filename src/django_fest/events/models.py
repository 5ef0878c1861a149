"""Organizer, Event, and MerchItem models for django-fest."""

from django.conf import settings
from django.db import models
from django.utils import timezone


class Organizer(models.Model):
    """A club or body that publishes events.

    Organizer accounts are provisioned by admins; a disabled or archived
    organizer can no longer act on its events.
    """

    class Status(models.TextChoices):
        """Lifecycle of an organizer account."""

        ACTIVE = "active", "Active"
        DISABLED = "disabled", "Disabled"
        ARCHIVED = "archived", "Archived"

    account = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organizer_profile",
    )
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True, default="")
    contact_email = models.EmailField()
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE


class Event(models.Model):
    """A fest event that participants register for or buy merchandise from.

    ``registration_count`` is a denormalized cache of non-cancelled
    registrations. It is only written through the capacity ledger in
    :mod:`django_fest.registration.services.capacity`.
    """

    class EventType(models.TextChoices):
        """Kinds of events."""

        NORMAL = "normal", "Normal"
        MERCHANDISE = "merchandise", "Merchandise"

    class Status(models.TextChoices):
        """Publication lifecycle of an event."""

        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    class Eligibility(models.TextChoices):
        """Which participants may register."""

        ALL = "all", "Everyone"
        IIIT_ONLY = "iiit_only", "IIIT participants only"
        NON_IIIT_ONLY = "non_iiit_only", "Non-IIIT participants only"

    organizer = models.ForeignKey(
        Organizer,
        on_delete=models.CASCADE,
        related_name="events",
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    event_type = models.CharField(max_length=20, choices=EventType.choices, default=EventType.NORMAL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    venue = models.CharField(max_length=300, blank=True, default="")

    registration_deadline = models.DateTimeField()
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)

    registration_limit = models.PositiveIntegerField(
        default=0,
        help_text="Maximum number of registrations. 0 means unlimited.",
    )
    registration_count = models.PositiveIntegerField(default=0)
    registration_open = models.BooleanField(default=True)
    registration_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    eligibility = models.CharField(max_length=20, choices=Eligibility.choices, default=Eligibility.ALL)

    is_team_event = models.BooleanField(default=False)
    min_team_size = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Leave empty to use the configured default.",
    )
    max_team_size = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Leave empty to use the configured default.",
    )
    form_schema = models.JSONField(
        default=list,
        blank=True,
        help_text="Ordered list of {label, fieldType, required, options} descriptors.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["registration_deadline", "name"]
        indexes = [
            models.Index(fields=["organizer", "status"], name="fest_event_org_status_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_merchandise(self) -> bool:
        return self.event_type == self.EventType.MERCHANDISE

    @property
    def deadline_passed(self) -> bool:
        """Return True once the registration deadline is behind us."""
        return timezone.now() > self.registration_deadline


class MerchItem(models.Model):
    """A purchasable item offered by a merchandise event.

    ``stock`` is decremented only when an order is approved.
    """

    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name="merch_items",
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    stock = models.PositiveIntegerField(default=0)
    variants = models.JSONField(default=list, blank=True, help_text='e.g. ["S", "M", "L", "XL"]')
    limit_per_user = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="fest_merchitem_event_name_uniq"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.event.name})"

    @property
    def available_variants(self) -> list[str]:
        """Return the declared variants with blanks removed."""
        return [str(v).strip() for v in (self.variants or []) if str(v).strip()]

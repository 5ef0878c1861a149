"""Merchandise order model for django-fest."""

from decimal import Decimal

from django.conf import settings
from django.db import models


class MerchOrder(models.Model):
    """A participant's purchase of a merchandise item.

    Orders wait for a payment proof, then for the organizer's review. Item
    name, variant and price are snapshotted at order time. Rejected orders do
    not count towards the per-user purchase limit.
    """

    class Status(models.TextChoices):
        """Order lifecycle states."""

        PENDING_PROOF = "pending_proof", "Pending proof"
        PENDING_APPROVAL = "pending_approval", "Pending approval"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    event = models.ForeignKey(
        "fest_events.Event",
        on_delete=models.CASCADE,
        related_name="merch_orders",
    )
    organizer = models.ForeignKey(
        "fest_events.Organizer",
        on_delete=models.CASCADE,
        related_name="merch_orders",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="fest_merch_orders",
    )
    item_name = models.CharField(max_length=200)
    variant = models.CharField(max_length=100, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_proof_url = models.URLField(max_length=2000, blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING_PROOF)
    review_comment = models.TextField(blank=True, default="")
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "user", "item_name"], name="fest_merch_event_user_item_idx"),
            models.Index(fields=["event", "status"], name="fest_merch_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.item_name} x{self.quantity} for {self.user} ({self.status})"

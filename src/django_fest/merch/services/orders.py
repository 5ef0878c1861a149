"""Merchandise order service.

Participants order items from a merchandise event and attach a payment
proof; the event's organizer then approves or rejects each order. Approval
draws down item stock, which is re-checked at review time, and gives the
buyer a registration for the event.
"""

import logging
from decimal import Decimal
from typing import Any

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from django_fest.accounts.identity import get_identity
from django_fest.events.models import Event, MerchItem
from django_fest.events.services import get_owned_event
from django_fest.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from django_fest.merch.models import MerchOrder
from django_fest.merch.signals import merch_order_approved
from django_fest.notifications import send_notification
from django_fest.registration.models import Registration
from django_fest.registration.services.capacity import ensure_capacity, lock_event, resync
from django_fest.registration.services.registration import RegistrationService

logger = logging.getLogger(__name__)

REVIEW_ACTIONS = ("approve", "reject")


def _resolve_item(event: Event, item_name: Any, variant: Any) -> tuple[MerchItem, str]:
    """Find an event's item by case-insensitive name and validate the variant."""
    name = item_name.strip() if isinstance(item_name, str) else ""
    item = event.merch_items.filter(name__iexact=name).first() if name else None
    if item is None:
        raise NotFoundError("Merchandise item not found")

    chosen = variant.strip() if isinstance(variant, str) else ""
    variants = item.available_variants
    if variants and chosen not in variants:
        raise ValidationError("Invalid merchandise variant")
    return item, chosen


def _parse_quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("quantity must be at least 1")
    try:
        quantity = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("quantity must be at least 1") from None
    if quantity < 1:
        raise ValidationError("quantity must be at least 1")
    return quantity


def ordered_quantity(event: Event, user_id: int, item_name: str, variant: str) -> int:
    """Return how many units of an item the user holds in non-rejected orders."""
    total = (
        MerchOrder.objects.filter(event=event, user_id=user_id, item_name=item_name, variant=variant)
        .exclude(status=MerchOrder.Status.REJECTED)
        .aggregate(total=Sum("quantity"))["total"]
    )
    return total or 0


class MerchOrderService:
    """Stateless service for merchandise orders."""

    @staticmethod
    def create_order(
        user_id: int,
        event_id: int,
        item_name: str,
        variant: str = "",
        quantity: Any = 1,
        payment_proof_url: str | None = None,
    ) -> MerchOrder:
        """Place an order for a merchandise item.

        The order starts in ``pending_approval`` when a payment proof URL is
        supplied and in ``pending_proof`` otherwise. Stock is not reserved.

        Args:
            user_id: The buying participant.
            event_id: The merchandise event.
            item_name: Item name, matched case-insensitively.
            variant: One of the item's variants, if it declares any.
            quantity: Units requested.
            payment_proof_url: Optional link to the payment proof.

        Returns:
            The created MerchOrder.

        Raises:
            NotFoundError: If the event or item does not exist.
            ValidationError: If the event does not sell merchandise or is
                closed, the variant or quantity is invalid, stock is short,
                or the per-user limit would be exceeded.
        """
        with transaction.atomic():
            event = lock_event(event_id)
            if not event.is_merchandise:
                raise ValidationError("This event does not support merchandise purchases")
            if event.status != Event.Status.PUBLISHED or not event.registration_open:
                raise ValidationError("Purchases are closed for this merchandise event")
            if event.deadline_passed:
                raise ValidationError("Purchase deadline has passed")

            requested = _parse_quantity(quantity)
            item, chosen_variant = _resolve_item(event, item_name, variant)
            if item.stock < requested:
                raise ValidationError("Requested quantity is not available in stock")

            limit = item.limit_per_user or 1
            if ordered_quantity(event, user_id, item.name, chosen_variant) + requested > limit:
                raise ValidationError(f"Purchase limit exceeded for this item. Max allowed: {limit}")

            proof_url = payment_proof_url.strip() if isinstance(payment_proof_url, str) else ""
            order = MerchOrder.objects.create(
                event=event,
                organizer_id=event.organizer_id,
                user_id=user_id,
                item_name=item.name,
                variant=chosen_variant,
                quantity=requested,
                unit_price=item.price,
                total_amount=item.price * Decimal(requested),
                payment_proof_url=proof_url,
                status=MerchOrder.Status.PENDING_APPROVAL if proof_url else MerchOrder.Status.PENDING_PROOF,
            )

        logger.info(
            "Created merch order %s for user %s: %s x%s (%s)",
            order.pk,
            user_id,
            order.item_name,
            order.quantity,
            order.status,
        )
        return order

    @staticmethod
    @transaction.atomic
    def submit_proof(user_id: int, order_id: int, proof_url: Any) -> MerchOrder:
        """Attach a payment proof and send the order back for review.

        Any earlier review outcome is cleared.

        Raises:
            ValidationError: If the proof URL is blank.
            NotFoundError: If the order does not exist.
            ForbiddenError: If the order belongs to someone else.
            ConflictError: If the order is already approved.
        """
        url = proof_url.strip() if isinstance(proof_url, str) else ""
        if not url:
            raise ValidationError("paymentProofUrl is required")

        order = MerchOrder.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise NotFoundError("Order not found")
        if order.user_id != user_id:
            raise ForbiddenError("Forbidden: cannot update another participant's order")
        if order.status == MerchOrder.Status.APPROVED:
            raise ConflictError("Approved orders cannot be modified")

        order.payment_proof_url = url
        order.status = MerchOrder.Status.PENDING_APPROVAL
        order.review_comment = ""
        order.reviewed_by = None
        order.reviewed_at = None
        order.save()
        logger.info("Payment proof submitted for merch order %s", order.pk)
        return order

    @staticmethod
    def review(organizer_user_id: int, event_id: int, order_id: int, action: str, comment: Any = "") -> MerchOrder:
        """Approve or reject an order awaiting review.

        Approval re-checks the item and its stock, decrements the stock,
        registers the buyer for the event (keeping any existing registration,
        and otherwise taking a seat under the event's limit) and notifies the
        buyer after commit.

        Args:
            organizer_user_id: The reviewing organizer's account user id.
            event_id: The merchandise event the order belongs to.
            order_id: The order to review.
            action: ``"approve"`` or ``"reject"``.
            comment: Optional review comment.

        Returns:
            The reviewed order.

        Raises:
            NotFoundError: If the organizer, event or order does not exist.
            ForbiddenError: If the organizer may not act on the event.
            ValidationError: If the event is not a merchandise event or the
                action is unknown.
            ConflictError: If the order is not awaiting review, or the item
                is gone or short of stock.
            CapacityError: If approving would register the buyer past the
                event's registration limit. The order stays pending.
        """
        owned = get_owned_event(organizer_user_id, event_id)
        if not owned.is_merchandise:
            raise ValidationError("This event does not support merchandise orders")
        if action not in REVIEW_ACTIONS:
            raise ValidationError("action must be either approve or reject")
        review_comment = comment.strip() if isinstance(comment, str) else ""

        registration = None
        with transaction.atomic():
            event = lock_event(owned.pk)
            order = MerchOrder.objects.select_for_update().filter(pk=order_id, event=event).first()
            if order is None:
                raise NotFoundError("Order not found")
            if order.status != MerchOrder.Status.PENDING_APPROVAL:
                raise ConflictError("Only pending approval orders can be reviewed")

            if action == "approve":
                item = MerchItem.objects.select_for_update().filter(event=event, name=order.item_name).first()
                if item is None:
                    raise ConflictError("Merchandise item no longer exists")
                if item.stock < order.quantity:
                    raise ConflictError("Insufficient stock for approval")
                if not Registration.objects.filter(event=event, user_id=order.user_id).exists():
                    ensure_capacity(event, 1, recount=True)
                item.stock -= order.quantity
                item.save(update_fields=["stock"])
                order.status = MerchOrder.Status.APPROVED
            else:
                order.status = MerchOrder.Status.REJECTED

            order.review_comment = review_comment
            order.reviewed_by_id = organizer_user_id
            order.reviewed_at = timezone.now()
            order.save()

            if order.status == MerchOrder.Status.APPROVED:
                registration, _ = RegistrationService.ensure_registration(
                    event,
                    order.user_id,
                    source=Registration.Source.MERCH,
                )
                resync(event)

        logger.info("Merch order %s %s by organizer user %s", order.pk, order.status, organizer_user_id)
        if registration is not None:
            merch_order_approved.send(sender=MerchOrder, order=order, registration=registration)
            buyer = get_identity(order.user_id)
            send_notification(
                buyer.email,
                f"Merchandise Order Approved: {event.name}",
                f"Hi {buyer.first_name or 'Participant'}, your order has been approved. "
                f"Ticket ID: {registration.ticket_id or 'N/A'}. QR: {registration.qr_code_url or 'N/A'}",
            )
        return order

    @staticmethod
    def list_for_user(user_id: int, event_id: int | None = None, status: str | None = None) -> list[MerchOrder]:
        """Return a participant's orders, newest first."""
        orders = MerchOrder.objects.filter(user_id=user_id).select_related("event")
        if event_id is not None:
            orders = orders.filter(event_id=event_id)
        if status:
            orders = orders.filter(status=status)
        return list(orders.order_by("-created_at"))

    @staticmethod
    def list_for_event(organizer_user_id: int, event_id: int, status: str | None = None) -> list[MerchOrder]:
        """Return the orders of a merchandise event the organizer owns, newest first.

        Raises:
            ValidationError: If the event is not a merchandise event.
        """
        event = get_owned_event(organizer_user_id, event_id)
        if not event.is_merchandise:
            raise ValidationError("This event does not support merchandise orders")
        orders = event.merch_orders.select_related("user", "reviewed_by")
        if status:
            orders = orders.filter(status=status)
        return list(orders.order_by("-created_at"))

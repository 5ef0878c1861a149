"""JSON representations of merchandise orders."""

from typing import Any

from django_fest.merch.models import MerchOrder
from django_fest.views import isoformat


def _contact(user: Any) -> dict[str, Any] | None:
    if user is None:
        return None
    return {"name": user.get_full_name(), "email": user.email}


def serialize_order(order: MerchOrder, *, for_organizer: bool = False) -> dict[str, Any]:
    """Return an order; organizers also see the buyer and reviewer."""
    data: dict[str, Any] = {
        "orderId": order.pk,
        "eventId": order.event_id,
        "itemName": order.item_name,
        "variant": order.variant,
        "quantity": order.quantity,
        "unitPrice": str(order.unit_price),
        "totalAmount": str(order.total_amount),
        "paymentProofUrl": order.payment_proof_url,
        "status": order.status,
        "reviewComment": order.review_comment,
        "reviewedAt": isoformat(order.reviewed_at),
        "createdAt": isoformat(order.created_at),
    }
    if for_organizer:
        data["participant"] = _contact(order.user)
        data["reviewedBy"] = _contact(order.reviewed_by)
    else:
        data["eventName"] = order.event.name
    return data

"""JSON views for merchandise orders."""

from typing import TYPE_CHECKING

from django.http import JsonResponse

from django_fest.exceptions import ValidationError
from django_fest.merch.serializers import serialize_order
from django_fest.merch.services.orders import MerchOrderService
from django_fest.views import FestJSONView

if TYPE_CHECKING:
    from django.http import HttpRequest


class MerchOrdersView(FestJSONView):
    """Place an order, or list the current user's orders."""

    def get(self, request: "HttpRequest") -> JsonResponse:
        """List orders, filtered by the optional ``eventId`` and ``status`` parameters."""
        orders = MerchOrderService.list_for_user(
            request.user.pk,
            event_id=self.query_int("eventId"),
            status=request.GET.get("status") or None,
        )
        return JsonResponse({"orders": [serialize_order(order) for order in orders]})

    def post(self, request: "HttpRequest") -> JsonResponse:
        """Create an order from ``{"eventId", "itemName", "variant", "quantity", "paymentProofUrl"}``."""
        payload = self.read_json()
        event_id = payload.get("eventId")
        if isinstance(event_id, bool) or not isinstance(event_id, int | str) or not str(event_id).isdigit():
            raise ValidationError("Invalid event id")
        order = MerchOrderService.create_order(
            request.user.pk,
            int(event_id),
            payload.get("itemName"),
            payload.get("variant"),
            payload.get("quantity", 1),
            payload.get("paymentProofUrl"),
        )
        return JsonResponse(serialize_order(order), status=201)


class MerchProofView(FestJSONView):
    """Submit a payment proof for one of the current user's orders."""

    def patch(self, request: "HttpRequest", order_id: int) -> JsonResponse:
        payload = self.read_json()
        order = MerchOrderService.submit_proof(request.user.pk, order_id, payload.get("paymentProofUrl"))
        return JsonResponse(serialize_order(order))


class OrganizerMerchOrdersView(FestJSONView):
    """Orders of a merchandise event, for its organizer."""

    def get(self, request: "HttpRequest", event_id: int) -> JsonResponse:
        orders = MerchOrderService.list_for_event(request.user.pk, event_id, status=request.GET.get("status") or None)
        return JsonResponse({"orders": [serialize_order(order, for_organizer=True) for order in orders]})


class OrganizerMerchReviewView(FestJSONView):
    """Approve or reject an order with ``{"action", "comment"}``."""

    def patch(self, request: "HttpRequest", event_id: int, order_id: int) -> JsonResponse:
        payload = self.read_json()
        order = MerchOrderService.review(
            request.user.pk,
            event_id,
            order_id,
            payload.get("action"),
            payload.get("comment", ""),
        )
        return JsonResponse(serialize_order(order, for_organizer=True))

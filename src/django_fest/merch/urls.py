"""URL configuration for the merchandise app."""

from django.urls import path

from django_fest.merch.views import (
    MerchOrdersView,
    MerchProofView,
    OrganizerMerchOrdersView,
    OrganizerMerchReviewView,
)

app_name = "merch"

urlpatterns = [
    path("merch/orders/", MerchOrdersView.as_view(), name="orders"),
    path("merch/orders/<int:order_id>/proof/", MerchProofView.as_view(), name="submit-proof"),
    path(
        "organizer/events/<int:event_id>/merch-orders/",
        OrganizerMerchOrdersView.as_view(),
        name="organizer-orders",
    ),
    path(
        "organizer/events/<int:event_id>/merch-orders/<int:order_id>/review/",
        OrganizerMerchReviewView.as_view(),
        name="review",
    ),
]

"""URL configuration for the registration app."""

from django.urls import path

from django_fest.registration.views import (
    MyEventRegistrationView,
    MyRegistrationsView,
    OrganizerRegistrationsView,
    RegisterView,
)

app_name = "registration"

urlpatterns = [
    path("events/<int:event_id>/register/", RegisterView.as_view(), name="register"),
    path("events/<int:event_id>/registration/", MyEventRegistrationView.as_view(), name="my-registration"),
    path("me/registrations/", MyRegistrationsView.as_view(), name="my-registrations"),
    path(
        "organizer/events/<int:event_id>/registrations/",
        OrganizerRegistrationsView.as_view(),
        name="organizer-registrations",
    ),
]

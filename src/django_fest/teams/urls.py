"""URL configuration for the teams app."""

from django.urls import path

from django_fest.teams.views import MyTeamView, OrganizerTeamsView, TeamCreateView, TeamJoinView, TeamRejectView

app_name = "teams"

urlpatterns = [
    path("events/<int:event_id>/team/", TeamCreateView.as_view(), name="create"),
    path("events/<int:event_id>/team/my/", MyTeamView.as_view(), name="my-team"),
    path("events/<int:event_id>/team/join/", TeamJoinView.as_view(), name="join"),
    path("events/<int:event_id>/team/reject/", TeamRejectView.as_view(), name="reject"),
    path("organizer/events/<int:event_id>/teams/", OrganizerTeamsView.as_view(), name="organizer-teams"),
]

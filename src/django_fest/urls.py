"""Root URL configuration for django-fest's JSON API.

Mount it in the host project::

    urlpatterns = [
        path("api/", include("django_fest.urls")),
    ]
"""

from django.urls import include, path

urlpatterns = [
    path("", include("django_fest.registration.urls")),
    path("", include("django_fest.teams.urls")),
    path("", include("django_fest.merch.urls")),
]

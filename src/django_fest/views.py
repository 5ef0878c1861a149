"""Shared plumbing for the django-fest JSON views.

Every endpoint requires a logged-in session. Service errors are rendered as
``{"detail": message}`` with the error's status code.
"""

import json
from typing import TYPE_CHECKING, Any

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.views import View

from django_fest.exceptions import FestError, ValidationError

if TYPE_CHECKING:
    from datetime import datetime

    from django.http import HttpRequest, HttpResponse


def isoformat(value: "datetime | None") -> str | None:
    """Render an optional datetime for JSON output."""
    return value.isoformat() if value is not None else None


class FestJSONView(LoginRequiredMixin, View):
    """Base class for session-authenticated JSON endpoints."""

    def handle_no_permission(self) -> JsonResponse:
        """Answer anonymous requests with a JSON 401 instead of a redirect."""
        return JsonResponse({"detail": "Authentication required"}, status=401)

    def dispatch(self, request: "HttpRequest", *args: Any, **kwargs: Any) -> "HttpResponse":
        """Dispatch the request, translating service errors into JSON responses.

        Args:
            request: The incoming HTTP request.
            *args: Positional arguments from the URL resolver.
            **kwargs: Keyword arguments from the URL pattern.

        Returns:
            The view's response, or a ``{"detail"}`` error response.
        """
        try:
            return super().dispatch(request, *args, **kwargs)
        except FestError as exc:
            return JsonResponse({"detail": exc.message}, status=exc.status_code)

    def read_json(self) -> dict[str, Any]:
        """Parse the request body as a JSON object; an empty body yields ``{}``.

        Raises:
            ValidationError: If the body is not a JSON object.
        """
        if not self.request.body:
            return {}
        try:
            payload = json.loads(self.request.body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError("Request body must be valid JSON") from None
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        return payload

    def query_int(self, name: str) -> int | None:
        """Read an optional integer query parameter.

        Raises:
            ValidationError: If the parameter is present but not an integer.
        """
        raw = self.request.GET.get(name, "").strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            raise ValidationError(f"Invalid {name}") from None

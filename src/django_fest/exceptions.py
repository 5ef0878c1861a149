"""Service-layer errors for django-fest.

Every business rejection raised by a service carries a human-readable
``message`` and the HTTP status class it maps to. The JSON views translate
them into ``{"detail": message}`` responses.
"""


class FestError(Exception):
    """Base class for expected business rejections."""

    status_code = 400

    def __init__(self, message: str) -> None:
        """Store the human-readable reason.

        Args:
            message: The rejection reason shown to the caller.
        """
        super().__init__(message)
        self.message = message


class ValidationError(FestError):
    """Malformed or missing input, or an operation the current state disallows."""

    status_code = 400


class ForbiddenError(FestError):
    """The actor has no rights over the target resource."""

    status_code = 403


class NotFoundError(FestError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(FestError):
    """The request clashes with existing resource state."""

    status_code = 409


class CapacityError(ConflictError):
    """Granting the requested seats would exceed the event's registration limit."""

    def __init__(self, message: str = "Event is fully booked") -> None:
        """Default to the standard fully-booked message."""
        super().__init__(message)


class TransientCreationFailure(FestError):
    """A bounded retry ran out of attempts; the whole operation may be retried."""

    status_code = 500

"""Error taxonomy for the event engine.

Each error carries the HTTP status the API layer answers with, so route
handlers never translate them by hand.
"""


class EventError(Exception):
    """Base class for all event engine errors."""

    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EventError):
    """Missing or malformed submission fields, or an undefined transition."""

    status_code = 400


class AuthorizationError(EventError):
    """A privilege-gated operation was attempted by an unprivileged actor."""

    status_code = 403


class EventNotFoundError(EventError):
    status_code = 404


class ImmutableFieldError(EventError):
    """Attempt to change a field that is fixed at creation (shop_id)."""

    status_code = 409


class PersistenceError(EventError):
    """The record store failed; the mutation was rolled back and may be retried."""

    status_code = 503
    retryable = True

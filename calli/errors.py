"""Error taxonomy for the booking core.

Flows convert every one of these into a user notification; none of them
escapes a flow coroutine.
"""


class CalliError(Exception):
    """Base class for booking core errors."""


class TransportError(CalliError):
    """Network failure, timeout, or a response body that is not a JSON object."""


class LocalValidationError(CalliError):
    """Required local state is missing, so the request is never dispatched."""


class InvalidTransitionError(CalliError):
    """Raised when a modal transition is not valid from the current modal."""

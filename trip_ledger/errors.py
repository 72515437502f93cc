"""
Service-layer exceptions.

Services raise these; the API layer maps them to HTTP responses
using ``status_code``. They subclass ValueError so callers that
only care about "the operation was rejected" can catch ValueError.
"""


class ServiceError(ValueError):
    """Base class for all rejected business operations."""

    status_code = 400


class ValidationError(ServiceError):
    """Malformed input, imbalanced entries, over-payments."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class BadRequestError(ServiceError):
    """The request is well-formed but the target is in the wrong state."""

    status_code = 400


class ConflictError(ServiceError):
    """The operation would break existing history or a uniqueness rule."""

    status_code = 409

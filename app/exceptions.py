"""Service-level errors.

Services raise these; routers translate them to HTTP responses. They
subclass ValueError so callers that only care about "the request was bad"
can keep catching ValueError.
"""


class ServiceError(ValueError):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Referenced resource does not exist or is not owned by the caller."""


class ValidationError(ServiceError):
    """Request data is missing or violates a business rule."""


class ConflictError(ServiceError):
    """A write collided with the storage uniqueness constraint."""

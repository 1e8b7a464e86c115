class DomainError(Exception):
    """Base exception for business rule violations.

    ``kind`` is the stable identifier returned to API clients.
    """

    kind = "DOMAIN_ERROR"


class AuthenticationError(DomainError):
    """Raised when the request carries no valid actor."""

    kind = "UNAUTHENTICATED"


class AuthorizationError(DomainError):
    """Raised when a user lacks the role or relationship for an action."""

    kind = "FORBIDDEN"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "VALIDATION_ERROR"


class InvalidStateError(DomainError):
    """Raised when the timesheet's current status forbids the action."""

    kind = "INVALID_STATE"


class InvalidTransitionError(DomainError):
    """Raised when the state machine has no edge for the requested action."""

    kind = "INVALID_TRANSITION"


class NotFoundError(DomainError):
    kind = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when a write violates a uniqueness constraint."""

    kind = "CONFLICT"


class StorageError(DomainError):
    kind = "STORAGE_ERROR"

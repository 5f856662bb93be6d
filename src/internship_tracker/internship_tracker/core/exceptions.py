class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "domain"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"


class NotFoundError(DomainError):
    """Raised when a log, request or program id is unknown."""

    kind = "not_found"


class ConflictError(DomainError):
    """Raised when an action conflicts with current state (open session, processed request)."""

    kind = "conflict"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "authorization"

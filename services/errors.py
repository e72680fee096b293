"""Domain exceptions raised by the service layer and mapped to HTTP statuses."""


class DomainError(Exception):
    """Base class for business rule violations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Input is missing, malformed, or breaks a business rule."""


class NotFoundError(DomainError):
    """A referenced record does not exist."""


class AuthenticationError(DomainError):
    """Credentials or bearer token are missing or invalid."""


class PermissionDeniedError(DomainError):
    """The authenticated user lacks the role required for the action."""

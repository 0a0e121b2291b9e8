"""Error hierarchy for idgate.

Error layers:
- IdGateError: Base class for all idgate errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage/network issues (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class IdGateError(Exception):
    """Base class for all idgate errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(IdGateError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class UserNotFoundError(NotFoundError):
    """A user referenced by a link or merge does not exist."""

    def __init__(
        self, message: str = "User not found", code: str | None = "user_not_found"
    ) -> None:
        super().__init__(message, code=code)


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Resource already exists or version conflict."""


class AlreadyLinkedError(ConflictError):
    """A provider account is already attached to a different user."""

    def __init__(
        self,
        message: str = "This account is already associated with another account",
        code: str | None = "already_linked",
    ) -> None:
        super().__init__(message, code=code)


class AuthorizationError(DomainError):
    """User not authorized for this operation."""


class ForbiddenError(AuthorizationError):
    """Authenticated user denied access (e.g. email not whitelisted)."""

    def __init__(self, message: str, code: str | None = "forbidden") -> None:
        super().__init__(message, code=code)


class AuthenticationError(DomainError):
    """Credentials missing or unusable."""


class InvalidTokenError(AuthenticationError):
    """Access token has a bad signature, is malformed or has expired."""

    def __init__(self, message: str = "Invalid token", code: str | None = "invalid_token") -> None:
        super().__init__(message, code=code)


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(IdGateError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend (database) is unavailable."""


class ExternalServiceError(InfrastructureError):
    """External service (OAuth provider, artifact service) is unavailable or failed."""


class ProviderAuthError(ExternalServiceError):
    """Exchanging an authorization code for a provider token failed."""


class ProviderProfileError(ExternalServiceError):
    """Fetching the user profile from a provider failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""

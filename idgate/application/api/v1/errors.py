"""Centralized error transformation for API routes.

Maps idgate errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from idgate.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    IdGateError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidStateError: 409,
    ConflictError: 409,
    AuthorizationError: 403,
    AuthenticationError: 401,
}


def _status_for(error: DomainError) -> int:
    # Walk the MRO so subclasses like UserNotFoundError inherit their parent's status
    for cls in type(error).__mro__:
        if cls in DOMAIN_ERROR_STATUS_MAP:
            return DOMAIN_ERROR_STATUS_MAP[cls]
    return 400


def map_idgate_error(error: IdGateError) -> HTTPException:
    """Map an idgate error to an HTTPException.

    Args:
        error: The idgate error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        # Infrastructure errors → 503 Service Unavailable
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = _status_for(error)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        # Distinguish 401 (unauthenticated) from 403 (unauthorized)
        if status_code == 401 or (
            isinstance(error, AuthorizationError) and error.code == "missing_token"
        ):
            return HTTPException(
                status_code=401,
                detail=detail,
                headers={"WWW-Authenticate": "Bearer"},
            )
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown IdGateError subclasses
    return HTTPException(status_code=500, detail=detail)


map_error = map_idgate_error

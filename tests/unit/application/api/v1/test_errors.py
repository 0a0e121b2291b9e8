"""Tests for mapping idgate errors to HTTP responses."""

import pytest

from idgate.application.api.v1.errors import map_error
from idgate.domain.shared.error import (
    AlreadyLinkedError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ForbiddenError,
    IdGateError,
    InvalidStateError,
    InvalidTokenError,
    NotFoundError,
    ProviderAuthError,
    StorageUnavailableError,
    UserNotFoundError,
    ValidationError,
)


class TestStatusCodes:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (NotFoundError("gone"), 404),
            (UserNotFoundError(), 404),
            (ValidationError("bad", field="emails"), 422),
            (InvalidStateError("nope"), 409),
            (AlreadyLinkedError(), 409),
            (AuthorizationError("Admin access required", code="access_denied"), 403),
            (ForbiddenError("Your email is not whitelisted."), 403),
            (ProviderAuthError("down"), 503),
            (StorageUnavailableError("db"), 503),
            (ConfigurationError("oops"), 503),
            (IdGateError("unknown"), 500),
        ],
    )
    def test_mapping(self, error, status):
        assert map_error(error).status_code == status

    def test_detail_carries_code_and_message(self):
        exc = map_error(AlreadyLinkedError())

        assert exc.detail == {
            "code": "already_linked",
            "message": "This account is already associated with another account",
        }

    def test_validation_field_is_included(self):
        assert map_error(ValidationError("bad", field="emails")).detail["field"] == "emails"


class TestUnauthenticated:
    @pytest.mark.parametrize(
        "error",
        [
            AuthenticationError("Authentication required", code="missing_token"),
            InvalidTokenError(),
            AuthorizationError("Authentication required", code="missing_token"),
        ],
    )
    def test_401_with_challenge(self, error):
        exc = map_error(error)

        assert exc.status_code == 401
        assert exc.headers == {"WWW-Authenticate": "Bearer"}

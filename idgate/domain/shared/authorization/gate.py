"""Handler-level authorization gates: public(), authenticated() and admin_only()."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("idgate.authz")


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``
    unless its command/query is marked ``__public__``.
    """


@dataclass(frozen=True)
class Public(Gate):
    """No authentication required."""


@dataclass(frozen=True)
class Authenticated(Gate):
    """Any authenticated principal (already whitelist-checked by the access guard)."""


@dataclass(frozen=True)
class AdminOnly(Gate):
    """Authenticated principal whose user carries the admin flag."""


_PUBLIC = Public()
_AUTHENTICATED = Authenticated()
_ADMIN_ONLY = AdminOnly()


def public() -> Public:
    """Mark a handler as publicly accessible (no auth required)."""
    return _PUBLIC


def authenticated() -> Authenticated:
    """Mark a handler as requiring an authenticated principal."""
    return _AUTHENTICATED


def admin_only() -> AdminOnly:
    """Mark a handler as requiring an admin principal."""
    return _ADMIN_ONLY


def enforce(gate: Any, handler: Any) -> None:
    """Evaluate a handler's gate against the principal it was built with.

    Raises:
        ConfigurationError: gate missing or of an unknown type
        AuthorizationError: no principal (code ``missing_token``) or not an admin
    """
    from idgate.domain.auth.model.principal import Principal
    from idgate.domain.shared.error import AuthorizationError, ConfigurationError

    handler_name = type(handler).__name__

    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {handler_name} has no __auth__ declaration")

    if isinstance(gate, Public):
        return

    principal = getattr(handler, "principal", None)
    if not isinstance(principal, Principal):
        raise AuthorizationError("Authentication required", code="missing_token")

    if isinstance(gate, Authenticated):
        return

    if isinstance(gate, AdminOnly):
        logger.debug(
            "Admin check: handler=%s, user_id=%s, admin=%s",
            handler_name,
            principal.user_id,
            principal.user.admin,
        )
        if not principal.user.admin:
            raise AuthorizationError(
                "Admin access required",
                code="access_denied",
            )
        return

    raise ConfigurationError(  # pragma: no cover
        f"Handler {handler_name} has unhandled __auth__ type: {type(gate).__name__}"
    )

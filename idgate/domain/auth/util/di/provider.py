"""DI provider for auth domain."""

import logging

from dishka import from_context, provide
from starlette.requests import Request

from idgate.config import Config
from idgate.domain.auth.command.login import CompleteOAuthHandler, GetAuthorizationUrlHandler
from idgate.domain.auth.command.whitelist import (
    AddWhitelistEmailsHandler,
    RemoveWhitelistEmailsHandler,
)
from idgate.domain.auth.model.identity import Anonymous, Identity
from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.model.value import UserId
from idgate.domain.auth.port.artifact import ArtifactAssociator
from idgate.domain.auth.port.provider import ProviderRegistry
from idgate.domain.auth.port.repository import UserRepository, WhitelistRepository
from idgate.domain.auth.query.current_user import GetCurrentUserHandler
from idgate.domain.auth.query.validate_token import ValidateProviderTokenHandler
from idgate.domain.auth.query.whitelist import ListWhitelistHandler
from idgate.domain.auth.service.guard import AccessGuard
from idgate.domain.auth.service.identity import IdentityService
from idgate.domain.auth.service.oauth import OAuthService
from idgate.domain.auth.service.token import TokenService
from idgate.domain.auth.service.whitelist import WhitelistService
from idgate.domain.shared.error import AuthenticationError, InvalidTokenError
from idgate.util.di.base import Provider
from idgate.util.di.scope import Scope

logger = logging.getLogger(__name__)


def bearer_token(request: Request) -> str | None:
    """Token from an ``Authorization: Bearer`` header, None if absent or malformed."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


class AuthProvider(Provider):
    """DI provider for auth domain services and handlers."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command Handlers
    get_authorization_url_handler = provide(GetAuthorizationUrlHandler, scope=Scope.UOW)
    complete_oauth_handler = provide(CompleteOAuthHandler, scope=Scope.UOW)
    add_whitelist_emails_handler = provide(AddWhitelistEmailsHandler, scope=Scope.UOW)
    remove_whitelist_emails_handler = provide(RemoveWhitelistEmailsHandler, scope=Scope.UOW)

    # Query Handlers
    get_current_user_handler = provide(GetCurrentUserHandler, scope=Scope.UOW)
    list_whitelist_handler = provide(ListWhitelistHandler, scope=Scope.UOW)
    validate_provider_token_handler = provide(ValidateProviderTokenHandler, scope=Scope.UOW)

    @provide(scope=Scope.UOW)
    def get_identity_service(self, user_repo: UserRepository) -> IdentityService:
        return IdentityService(_users=user_repo)

    @provide(scope=Scope.UOW)
    def get_whitelist_service(self, repo: WhitelistRepository) -> WhitelistService:
        return WhitelistService(_repo=repo)

    @provide(scope=Scope.UOW)
    def get_token_service(self, config: Config, whitelist: WhitelistService) -> TokenService:
        return TokenService(
            _config=config.auth.jwt,
            _whitelist=whitelist,
            _state_expire_seconds=config.auth.state_expire_seconds,
        )

    @provide(scope=Scope.UOW)
    def get_access_guard(self, config: Config, whitelist: WhitelistService) -> AccessGuard:
        return AccessGuard(
            _whitelist=whitelist,
            _recheck_whitelist=config.auth.recheck_whitelist,
        )

    @provide(scope=Scope.UOW)
    def get_oauth_service(
        self,
        config: Config,
        registry: ProviderRegistry,
        identities: IdentityService,
        tokens: TokenService,
        associator: ArtifactAssociator,
    ) -> OAuthService:
        return OAuthService(
            _registry=registry,
            _identities=identities,
            _tokens=tokens,
            _associator=associator,
            _frontend=config.frontend,
        )

    @provide(scope=Scope.UOW)
    async def get_identity(
        self,
        request: Request,
        token_service: TokenService,
        user_repo: UserRepository,
    ) -> Identity:
        """Resolve Identity from the bearer token.

        Returns Anonymous when there is no usable token or its user no longer
        exists (e.g. merged away); Principal otherwise.
        """
        token = bearer_token(request)
        if token is None:
            return Anonymous()

        try:
            claims = token_service.verify(token)
            user_id = UserId.parse(claims.sub)
        except InvalidTokenError as e:
            logger.debug("Ignoring bearer token: %s", e.message)
            return Anonymous()
        except ValueError:
            logger.debug("Ignoring bearer token with malformed subject")
            return Anonymous()

        user = await user_repo.get(user_id)
        if user is None:
            logger.info("Bearer token for unknown user: user_id=%s", user_id)
            return Anonymous()

        return Principal(user=user, claims=claims)

    @provide(scope=Scope.UOW)
    async def get_principal(self, identity: Identity, guard: AccessGuard) -> Principal:
        """Authenticated, whitelist-checked principal. Raises if either check fails."""
        if not isinstance(identity, Principal):
            raise AuthenticationError("Authentication required", code="missing_token")
        await guard.check(identity)
        return identity

"""Login commands for the OAuth flow."""

import logging
from typing import ClassVar

from idgate.domain.auth.model.identity import Identity
from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.model.state import OAuthState
from idgate.domain.auth.service.oauth import CallbackOutcome, OAuthService
from idgate.domain.shared.command import Command, CommandHandler, Result
from idgate.domain.shared.error import AuthorizationError

logger = logging.getLogger(__name__)


class GetAuthorizationUrl(Command):
    """Build the provider consent URL for a login or a link."""

    __public__: ClassVar[bool] = True

    provider: str
    path: str = "/"
    mode: str = "auth"
    report_id: str = ""
    origin: str | None = None
    user_id: str | None = None  # Set only when linking a second provider


class GetAuthorizationUrlResult(Result):
    auth_url: str


class GetAuthorizationUrlHandler(CommandHandler[GetAuthorizationUrl, GetAuthorizationUrlResult]):
    oauth_service: OAuthService
    identity: Identity

    async def run(self, cmd: GetAuthorizationUrl) -> GetAuthorizationUrlResult:
        if cmd.user_id:
            # A link request can only be made by the user being linked
            if not isinstance(self.identity, Principal):
                raise AuthorizationError(
                    "Authentication required to link an account", code="missing_token"
                )
            if str(self.identity.user_id) != cmd.user_id:
                raise AuthorizationError(
                    "Cannot link an account to another user", code="access_denied"
                )

        state = OAuthState(
            path=cmd.path,
            report_id=cmd.report_id,
            user_id=cmd.user_id or None,
            mode=cmd.mode,
            origin=cmd.origin,
        )
        auth_url = self.oauth_service.authorization_url(cmd.provider, state)
        logger.info(
            "Authorization URL issued: provider=%s, linking=%s", cmd.provider, state.is_linking
        )
        return GetAuthorizationUrlResult(auth_url=auth_url)


class CompleteOAuth(Command):
    """Finish the flow after the provider redirects back with a code."""

    __public__: ClassVar[bool] = True

    provider: str
    code: str | None = None
    state: str | None = None


class CompleteOAuthResult(Result):
    redirect_url: str
    succeeded: bool
    user_id: str | None = None


class CompleteOAuthHandler(CommandHandler[CompleteOAuth, CompleteOAuthResult]):
    oauth_service: OAuthService

    async def run(self, cmd: CompleteOAuth) -> CompleteOAuthResult:
        outcome: CallbackOutcome = await self.oauth_service.complete(
            cmd.provider, cmd.code, cmd.state
        )
        return CompleteOAuthResult(
            redirect_url=outcome.redirect_url,
            succeeded=outcome.succeeded,
            user_id=str(outcome.user.id) if outcome.user else None,
        )

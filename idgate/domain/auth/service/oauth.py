"""OAuth orchestration: from provider callback to a frontend redirect."""

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import quote, urlencode

from idgate.config import Frontend
from idgate.domain.auth.model.state import OAuthState
from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import ProviderProfile, UserId
from idgate.domain.auth.port.artifact import ArtifactAssociator, AssociationOutcome
from idgate.domain.auth.port.provider import ProviderRegistry
from idgate.domain.auth.service.identity import IdentityService
from idgate.domain.auth.service.provider import ProviderStrategy, build_strategy
from idgate.domain.auth.service.token import TokenService
from idgate.domain.shared.error import (
    IdGateError,
    NotFoundError,
    ProviderAuthError,
    UserNotFoundError,
)
from idgate.domain.shared.service import Service

logger = logging.getLogger(__name__)


class CallbackStage(StrEnum):
    AWAITING_CODE = "awaiting_code"
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    IDENTITY_RESOLVED = "identity_resolved"
    TOKEN_ISSUED = "token_issued"
    REDIRECT_BUILT = "redirect_built"
    FAILED = "failed"


class LinkOutcome(StrEnum):
    NONE = "none"  # fresh login
    LINKED = "linked"
    ALREADY_LINKED = "already_linked"
    MERGED = "merged"


@dataclass
class CallbackOutcome:
    """Where to send the browser, plus what happened on the way."""

    redirect_url: str
    stage: CallbackStage
    user: User | None = None
    link: LinkOutcome = LinkOutcome.NONE
    association: AssociationOutcome = AssociationOutcome.SKIPPED
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is CallbackStage.REDIRECT_BUILT


def public_user(user: User) -> dict[str, Any]:
    """User fields safe to hand to the frontend, keyed the way it expects."""
    return {
        "id": str(user.id),
        "githubId": user.github_id or None,
        "githubUsername": user.github_username or None,
        "googleId": user.google_id or None,
        "googleEmail": user.google_email or None,
        "email": user.email or None,
        "emails": list(user.emails),
        "name": user.name or None,
        "avatarUrl": user.avatar_url or None,
        "admin": user.admin,
    }


class OAuthService(Service):
    """Runs one OAuth callback through its stages.

    AWAITING_CODE -> TOKEN_EXCHANGED -> PROFILE_FETCHED -> IDENTITY_RESOLVED
    -> TOKEN_ISSUED -> REDIRECT_BUILT. Any IdGateError on the way ends in
    FAILED with a redirect to the frontend error page instead of an exception.
    """

    _registry: ProviderRegistry
    _identities: IdentityService
    _tokens: TokenService
    _associator: ArtifactAssociator
    _frontend: Frontend

    def strategy(self, provider: str) -> ProviderStrategy:
        client = self._registry.get(provider)
        if client is None:
            available = ", ".join(self._registry.available_providers()) or "none"
            raise NotFoundError(
                f"Unknown provider: {provider}. Available: {available}",
                code="unknown_provider",
            )
        return build_strategy(client, self._identities)

    def authorization_url(self, provider: str, state: OAuthState) -> str:
        """Provider consent URL carrying a signed copy of the state."""
        strategy = self.strategy(provider)
        return strategy.authorization_url(self._tokens.create_state(state))

    async def complete(
        self, provider: str, code: str | None, raw_state: str | None
    ) -> CallbackOutcome:
        """Handle the provider's redirect back to us."""
        state = self._tokens.parse_state(raw_state)
        origin = self.resolve_origin(state)
        stage = CallbackStage.AWAITING_CODE

        try:
            strategy = self.strategy(provider)
            if not code:
                raise ProviderAuthError("Authorization code not provided", code="missing_code")

            token = await strategy.exchange_code_for_token(code)
            stage = self._advance(provider, CallbackStage.TOKEN_EXCHANGED)

            profile = await strategy.get_user_info(token)
            stage = self._advance(provider, CallbackStage.PROFILE_FETCHED)

            if state.is_linking:
                user, link = await self._resolve_link(strategy, state, profile)
            else:
                user, link = await strategy.find_or_create_user(profile), LinkOutcome.NONE
            stage = self._advance(provider, CallbackStage.IDENTITY_RESOLVED)

            jwt_token = await self._tokens.issue(user)
            stage = self._advance(provider, CallbackStage.TOKEN_ISSUED)
        except IdGateError as e:
            logger.warning(
                "OAuth callback failed: provider=%s, stage=%s, code=%s, message=%s",
                provider,
                stage,
                e.code,
                e.message,
            )
            return CallbackOutcome(
                redirect_url=self.build_error_url(origin, e.message),
                stage=CallbackStage.FAILED,
                error=e.message,
            )

        association = AssociationOutcome.SKIPPED
        if state.report_id and not state.is_linking:
            association = await self._associator.associate(state.report_id, user.id)
            if association is AssociationOutcome.FAILED:
                logger.warning(
                    "Could not associate report %s with user %s", state.report_id, user.id
                )

        redirect_url = self.build_redirect_url(
            origin=origin,
            state=state,
            user=user,
            provider_token=token.access_token,
            jwt_token=jwt_token,
            linked=link is not LinkOutcome.NONE,
        )
        logger.info(
            "OAuth complete: provider=%s, user_id=%s, link=%s, display_name=%s",
            provider,
            user.id,
            link,
            strategy.display_name(user),
        )
        return CallbackOutcome(
            redirect_url=redirect_url,
            stage=CallbackStage.REDIRECT_BUILT,
            user=user,
            link=link,
            association=association,
        )

    async def _resolve_link(
        self, strategy: ProviderStrategy, state: OAuthState, profile: ProviderProfile
    ) -> tuple[User, LinkOutcome]:
        try:
            user_id = UserId.parse(state.user_id or "")
        except ValueError as e:
            raise UserNotFoundError(f"User not found: {state.user_id}") from e

        existing = await strategy.find_existing_user(profile.provider_id)
        if existing is None:
            return await strategy.link_account(user_id, profile), LinkOutcome.LINKED
        if existing.id == user_id:
            return existing, LinkOutcome.ALREADY_LINKED
        return await self._identities.merge(user_id, existing.id), LinkOutcome.MERGED

    def resolve_origin(self, state: OAuthState) -> str:
        """The requested origin if allowed, otherwise the configured frontend URL."""
        if state.origin and self._frontend.is_allowed_origin(state.origin):
            return state.origin.rstrip("/")
        if state.origin:
            logger.warning("Ignoring redirect origin not in allowed list: %s", state.origin)
        return self._frontend.url.rstrip("/")

    def build_redirect_url(
        self,
        *,
        origin: str,
        state: OAuthState,
        user: User,
        provider_token: str,
        jwt_token: str,
        linked: bool,
    ) -> str:
        path = state.safe_path()
        user_data = {
            **public_user(user),
            "jwtToken": jwt_token,
            "linkedAccount": linked,
            "reportId": state.report_id or None,
            "mode": state.mode,
            "from": path,
        }
        query = urlencode(
            {"token": provider_token, "user": json.dumps(user_data, separators=(",", ":"))},
            quote_via=quote,
        )
        return f"{origin}{path}?{query}"

    def build_error_url(self, origin: str, message: str) -> str:
        return f"{origin}/auth/error?message={quote(message)}"

    @staticmethod
    def _advance(provider: str, stage: CallbackStage) -> CallbackStage:
        logger.debug("OAuth callback: provider=%s, stage=%s", provider, stage)
        return stage


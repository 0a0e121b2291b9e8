"""Check whether a provider access token is still usable."""

import logging
from typing import Any

from idgate.domain.auth.model.value import ProviderToken
from idgate.domain.auth.service.oauth import OAuthService
from idgate.domain.shared.authorization.gate import public
from idgate.domain.shared.error import IdGateError
from idgate.domain.shared.query import Query, QueryHandler, Result

logger = logging.getLogger(__name__)


class ValidateProviderToken(Query):
    token: str
    provider: str = "github"


class ValidateProviderTokenResult(Result):
    valid: bool
    user: dict[str, Any] | None = None
    error: str | None = None


class ValidateProviderTokenHandler(
    QueryHandler[ValidateProviderToken, ValidateProviderTokenResult]
):
    """Asks the provider for the profile behind a token; any failure means invalid."""

    __auth__ = public()
    oauth_service: OAuthService

    async def run(self, query: ValidateProviderToken) -> ValidateProviderTokenResult:
        try:
            strategy = self.oauth_service.strategy(query.provider)
            profile = await strategy.get_user_info(ProviderToken(access_token=query.token))
        except IdGateError as e:
            logger.info(
                "Provider token rejected: provider=%s, reason=%s", query.provider, e.message
            )
            return ValidateProviderTokenResult(valid=False, error=e.message)

        return ValidateProviderTokenResult(
            valid=True,
            user={
                "id": profile.provider_id,
                "login": profile.username or None,
                "email": profile.email or None,
                "name": profile.name or None,
                "avatarUrl": profile.avatar_url or None,
            },
        )

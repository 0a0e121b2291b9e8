"""Google OAuth adapter."""

import logging
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

import httpx

from idgate.config import GoogleConfig
from idgate.domain.auth.model.value import ProviderKind, ProviderProfile, ProviderToken
from idgate.domain.auth.port.provider import OAuthClient
from idgate.domain.shared.error import ProviderAuthError, ProviderProfileError
from idgate.infrastructure.auth.http import request_json

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class GoogleOAuthClient(OAuthClient):
    """OAuthClient for Google OAuth 2.0 web clients."""

    def __init__(self, config: GoogleConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def provider(self) -> ProviderKind:
        return ProviderKind.GOOGLE

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self._config.client_id,
            "redirect_uri": self._config.callback_url,
            "response_type": "code",
            "scope": self._config.scope,
            "access_type": "online",
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> ProviderToken:
        data = await request_json(
            self._http,
            "POST",
            TOKEN_URL,
            data={
                "client_id": self._config.client_id,
                "client_secret": self._config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self._config.callback_url,
            },
            headers={"Accept": "application/json"},
            error=ProviderAuthError,
            action="Google token exchange",
        )

        if not isinstance(data, dict):
            raise ProviderAuthError("Google token exchange returned an unexpected payload")
        if data.get("error"):
            logger.warning("Google token exchange rejected: %s", data.get("error"))
            raise ProviderAuthError(
                data.get("error_description") or data["error"], code="provider_error"
            )
        access_token = data.get("access_token")
        if not access_token:
            raise ProviderAuthError("Google did not return an access token")

        expires_at = None
        if isinstance(data.get("expires_in"), int):
            expires_at = datetime.now(UTC) + timedelta(seconds=data["expires_in"])
        return ProviderToken(access_token=access_token, expires_at=expires_at)

    async def fetch_profile(self, token: ProviderToken) -> ProviderProfile:
        data = await request_json(
            self._http,
            "GET",
            USERINFO_URL,
            headers={"Authorization": f"Bearer {token.access_token}"},
            error=ProviderProfileError,
            action="Google profile fetch",
        )
        if not isinstance(data, dict) or not data.get("id"):
            raise ProviderProfileError("Google profile has no user id")

        return ProviderProfile(
            provider=ProviderKind.GOOGLE,
            provider_id=str(data["id"]),
            email=data.get("email") or "",
            name=data.get("name") or "",
            avatar_url=data.get("picture") or "",
            access_token=token.access_token,
            expires_at=token.expires_at,
        )

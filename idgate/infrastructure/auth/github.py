"""GitHub OAuth adapter."""

import logging
from urllib.parse import urlencode

import httpx

from idgate.config import GitHubConfig
from idgate.domain.auth.model.value import ProviderKind, ProviderProfile, ProviderToken
from idgate.domain.auth.port.provider import OAuthClient
from idgate.domain.shared.error import ProviderAuthError, ProviderProfileError
from idgate.infrastructure.auth.http import request_json

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
API_URL = "https://api.github.com"


class GitHubOAuthClient(OAuthClient):
    """OAuthClient for GitHub OAuth apps."""

    def __init__(self, config: GitHubConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def provider(self) -> ProviderKind:
        return ProviderKind.GITHUB

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self._config.client_id,
            "scope": self._config.scope,
            "state": state,
        }
        if self._config.callback_url:
            params["redirect_uri"] = self._config.callback_url
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> ProviderToken:
        body = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "code": code,
        }
        if self._config.callback_url:
            body["redirect_uri"] = self._config.callback_url

        data = await request_json(
            self._http,
            "POST",
            TOKEN_URL,
            json=body,
            headers={"Accept": "application/json"},
            error=ProviderAuthError,
            action="GitHub token exchange",
        )

        # GitHub reports bad codes with HTTP 200 and an error payload
        if not isinstance(data, dict):
            raise ProviderAuthError("GitHub token exchange returned an unexpected payload")
        if data.get("error"):
            logger.warning("GitHub token exchange rejected: %s", data.get("error"))
            raise ProviderAuthError(
                data.get("error_description") or data["error"], code="provider_error"
            )
        access_token = data.get("access_token")
        if not access_token:
            raise ProviderAuthError("GitHub did not return an access token")

        return ProviderToken(access_token=access_token)

    async def fetch_profile(self, token: ProviderToken) -> ProviderProfile:
        data = await request_json(
            self._http,
            "GET",
            f"{API_URL}/user",
            headers=self._auth_headers(token),
            error=ProviderProfileError,
            action="GitHub profile fetch",
        )
        if not isinstance(data, dict) or data.get("id") is None:
            raise ProviderProfileError("GitHub profile has no user id")

        email = data.get("email") or await self._primary_email(token)
        return ProviderProfile(
            provider=ProviderKind.GITHUB,
            provider_id=str(data["id"]),
            email=email or "",
            name=data.get("name") or "",
            avatar_url=data.get("avatar_url") or "",
            username=data.get("login") or "",
            access_token=token.access_token,
            expires_at=token.expires_at,
        )

    async def _primary_email(self, token: ProviderToken) -> str:
        """Primary verified address for users who hide their public email."""
        try:
            emails = await request_json(
                self._http,
                "GET",
                f"{API_URL}/user/emails",
                headers=self._auth_headers(token),
                error=ProviderProfileError,
                action="GitHub email lookup",
            )
        except ProviderProfileError as e:
            # Optional lookup: the profile is usable without it
            logger.info("Continuing without GitHub email: %s", e.message)
            return ""

        for entry in emails if isinstance(emails, list) else []:
            if isinstance(entry, dict) and entry.get("primary") and entry.get("verified"):
                return entry.get("email") or ""
        return ""

    @staticmethod
    def _auth_headers(token: ProviderToken) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token.access_token}",
            "Accept": "application/vnd.github+json",
        }

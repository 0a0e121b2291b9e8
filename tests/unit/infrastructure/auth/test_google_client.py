"""Tests for GoogleOAuthClient against a mocked Google API."""

from datetime import UTC, datetime
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from idgate.config import GoogleConfig
from idgate.domain.auth.model.value import ProviderKind, ProviderToken
from idgate.domain.shared.error import ProviderAuthError, ProviderProfileError
from idgate.infrastructure.auth.google import GoogleOAuthClient


def make_client(handler) -> GoogleOAuthClient:
    config = GoogleConfig(
        client_id="g-client",
        client_secret="g-secret",
        callback_url="https://gateway.test/api/v1/auth/google/callback",
    )
    return GoogleOAuthClient(config, httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestAuthorizationUrl:
    def test_requests_code_with_online_access(self):
        url = make_client(lambda r: httpx.Response(500)).authorization_url("s")

        params = parse_qs(urlsplit(url).query)
        assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")
        assert params["response_type"] == ["code"]
        assert params["access_type"] == ["online"]
        assert params["scope"] == ["openid email profile"]
        assert params["redirect_uri"] == ["https://gateway.test/api/v1/auth/google/callback"]
        assert params["state"] == ["s"]


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_posts_form_and_computes_expiry(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"access_token": "ya29", "expires_in": 3599})

        before = datetime.now(UTC)
        token = await make_client(handler).exchange_code("code-1")

        assert token.access_token == "ya29"
        assert token.expires_at is not None
        assert 3590 <= (token.expires_at - before).total_seconds() <= 3610
        assert seen["form"]["grant_type"] == ["authorization_code"]
        assert seen["form"]["code"] == ["code-1"]

    @pytest.mark.asyncio
    async def test_invalid_grant(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(ProviderAuthError) as exc_info:
            await make_client(handler).exchange_code("used")
        assert exc_info.value.message == "Google token exchange failed: 400"


class TestFetchProfile:
    @pytest.mark.asyncio
    async def test_maps_userinfo(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "id": "1098",
                    "email": "b@x.com",
                    "name": "Bee",
                    "picture": "https://img.test/b",
                },
            )

        profile = await make_client(handler).fetch_profile(ProviderToken(access_token="ya29"))

        assert profile.provider is ProviderKind.GOOGLE
        assert profile.provider_id == "1098"
        assert profile.email == "b@x.com"
        assert profile.avatar_url == "https://img.test/b"
        assert profile.username == ""

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        with pytest.raises(ProviderProfileError) as exc_info:
            await make_client(lambda r: httpx.Response(200, text="<html>")).fetch_profile(
                ProviderToken(access_token="t")
            )
        assert exc_info.value.code == "provider_error"

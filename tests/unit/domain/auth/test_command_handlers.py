"""Unit tests for auth command and query handlers, including their gates."""

import time
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from idgate.domain.auth.command.login import (
    CompleteOAuth,
    CompleteOAuthHandler,
    GetAuthorizationUrl,
    GetAuthorizationUrlHandler,
)
from idgate.domain.auth.command.whitelist import (
    AddWhitelistEmails,
    AddWhitelistEmailsHandler,
    RemoveWhitelistEmails,
    RemoveWhitelistEmailsHandler,
)
from idgate.domain.auth.model.claims import AccessClaims
from idgate.domain.auth.model.identity import Anonymous
from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.model.state import OAuthState
from idgate.domain.auth.model.value import ProviderKind, ProviderProfile, ProviderToken
from idgate.domain.auth.model.whitelist import WhitelistEntry
from idgate.domain.auth.query.current_user import GetCurrentUser, GetCurrentUserHandler
from idgate.domain.auth.query.validate_token import (
    ValidateProviderToken,
    ValidateProviderTokenHandler,
)
from idgate.domain.auth.query.whitelist import ListWhitelist, ListWhitelistHandler
from idgate.domain.auth.service.oauth import CallbackOutcome, CallbackStage
from idgate.domain.auth.service.whitelist import WhitelistService
from idgate.domain.shared.error import AuthorizationError, NotFoundError, ProviderProfileError
from tests.factories import make_user, make_whitelist_repo


def make_principal(**user_fields) -> Principal:
    user = make_user(**user_fields)
    now = int(time.time())
    return Principal(
        user=user,
        claims=AccessClaims(sub=str(user.id), whitelisted=True, iat=now, exp=now + 60),
    )


def make_oauth_service() -> MagicMock:
    service = MagicMock()
    service.authorization_url.return_value = "https://github.com/login/oauth/authorize?state=s"
    service.complete = AsyncMock()
    return service


class TestGetAuthorizationUrl:
    @pytest.mark.asyncio
    async def test_anonymous_login(self):
        oauth = make_oauth_service()
        handler = GetAuthorizationUrlHandler(oauth_service=oauth, identity=Anonymous())

        result = await handler.run(
            GetAuthorizationUrl(provider="github", path="/r", report_id="r-1", origin=None)
        )

        assert result.auth_url.startswith("https://github.com/")
        oauth.authorization_url.assert_called_once_with(
            "github", OAuthState(path="/r", report_id="r-1")
        )

    @pytest.mark.asyncio
    async def test_linking_requires_authentication(self):
        handler = GetAuthorizationUrlHandler(
            oauth_service=make_oauth_service(), identity=Anonymous()
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(GetAuthorizationUrl(provider="google", user_id="someone"))
        assert exc_info.value.code == "missing_token"

    @pytest.mark.asyncio
    async def test_linking_for_another_user_is_denied(self):
        handler = GetAuthorizationUrlHandler(
            oauth_service=make_oauth_service(), identity=make_principal()
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(GetAuthorizationUrl(provider="google", user_id="someone-else"))
        assert exc_info.value.code == "access_denied"

    @pytest.mark.asyncio
    async def test_linking_for_self_carries_user_id(self):
        principal = make_principal()
        oauth = make_oauth_service()
        handler = GetAuthorizationUrlHandler(oauth_service=oauth, identity=principal)

        await handler.run(
            GetAuthorizationUrl(provider="google", user_id=str(principal.user_id), mode="connect")
        )

        state = oauth.authorization_url.call_args.args[1]
        assert state.user_id == str(principal.user_id)
        assert state.is_linking


class TestCompleteOAuth:
    @pytest.mark.asyncio
    async def test_returns_redirect_from_outcome(self):
        user = make_user()
        oauth = make_oauth_service()
        oauth.complete.return_value = CallbackOutcome(
            redirect_url="https://app/x?token=t", stage=CallbackStage.REDIRECT_BUILT, user=user
        )
        handler = CompleteOAuthHandler(oauth_service=oauth)

        result = await handler.run(CompleteOAuth(provider="github", code="c", state="s"))

        oauth.complete.assert_awaited_once_with("github", "c", "s")
        assert result.redirect_url == "https://app/x?token=t"
        assert result.succeeded is True
        assert result.user_id == str(user.id)

    @pytest.mark.asyncio
    async def test_failed_outcome(self):
        oauth = make_oauth_service()
        oauth.complete.return_value = CallbackOutcome(
            redirect_url="https://app/auth/error?message=x", stage=CallbackStage.FAILED
        )
        handler = CompleteOAuthHandler(oauth_service=oauth)

        result = await handler.run(CompleteOAuth(provider="github"))

        assert result.succeeded is False
        assert result.user_id is None


class TestWhitelistHandlers:
    @pytest.mark.asyncio
    async def test_admin_can_add(self):
        service = WhitelistService(_repo=make_whitelist_repo())
        handler = AddWhitelistEmailsHandler(
            principal=make_principal(admin=True), whitelist_service=service
        )

        result = await handler.run(AddWhitelistEmails(emails="a@x.com,bad"))

        assert result.added == ["a@x.com"]
        assert result.skipped == ["bad"]

    @pytest.mark.asyncio
    async def test_non_admin_cannot_add(self):
        repo = make_whitelist_repo()
        handler = AddWhitelistEmailsHandler(
            principal=make_principal(), whitelist_service=WhitelistService(_repo=repo)
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(AddWhitelistEmails(emails=["a@x.com"]))

        assert exc_info.value.code == "access_denied"
        repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_can_remove(self):
        service = WhitelistService(_repo=make_whitelist_repo({"a@x.com"}))
        handler = RemoveWhitelistEmailsHandler(
            principal=make_principal(admin=True), whitelist_service=service
        )

        result = await handler.run(RemoveWhitelistEmails(emails=["a@x.com", "b@x.com"]))

        assert result.removed == ["a@x.com"]
        assert result.not_found == ["b@x.com"]

    @pytest.mark.asyncio
    async def test_admin_can_list(self):
        created = datetime(2024, 1, 1, tzinfo=UTC)
        repo = make_whitelist_repo()
        repo.list_all.side_effect = None
        repo.list_all.return_value = [WhitelistEntry(email="a@x.com", created_at=created)]
        handler = ListWhitelistHandler(
            principal=make_principal(admin=True), whitelist_service=WhitelistService(_repo=repo)
        )

        result = await handler.run(ListWhitelist())

        assert [(e.email, e.created_at) for e in result.entries] == [("a@x.com", created)]

    @pytest.mark.asyncio
    async def test_non_admin_cannot_list(self):
        handler = ListWhitelistHandler(
            principal=make_principal(),
            whitelist_service=WhitelistService(_repo=make_whitelist_repo()),
        )

        with pytest.raises(AuthorizationError):
            await handler.run(ListWhitelist())


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_returns_public_fields_and_display_name(self):
        principal = make_principal(github_id="1", github_username="octo", emails=["a@x.com"])
        handler = GetCurrentUserHandler(principal=principal)

        result = await handler.run(GetCurrentUser())

        assert result.user["id"] == str(principal.user_id)
        assert result.user["githubUsername"] == "octo"
        assert result.display_name == "octo"

    @pytest.mark.asyncio
    async def test_google_only_user_is_labelled_by_google_email(self):
        handler = GetCurrentUserHandler(
            principal=make_principal(google_id="g", google_email="g@x.com")
        )

        result = await handler.run(GetCurrentUser())

        assert result.display_name == "g@x.com"


class TestValidateProviderToken:
    def _handler(self, client: MagicMock) -> ValidateProviderTokenHandler:
        oauth = MagicMock()
        strategy = MagicMock()
        strategy.get_user_info = client
        oauth.strategy.return_value = strategy
        return ValidateProviderTokenHandler(oauth_service=oauth)

    @pytest.mark.asyncio
    async def test_valid_token(self):
        fetch = AsyncMock(
            return_value=ProviderProfile(
                provider=ProviderKind.GITHUB,
                provider_id="1",
                username="octo",
                email="a@x.com",
                name="Ann",
            )
        )
        handler = self._handler(fetch)

        result = await handler.run(ValidateProviderToken(token="gho_1"))

        fetch.assert_awaited_once_with(ProviderToken(access_token="gho_1"))
        assert result.valid is True
        assert result.user == {
            "id": "1",
            "login": "octo",
            "email": "a@x.com",
            "name": "Ann",
            "avatarUrl": None,
        }

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        handler = self._handler(
            AsyncMock(side_effect=ProviderProfileError("GitHub profile fetch failed: 401"))
        )

        result = await handler.run(ValidateProviderToken(token="expired"))

        assert result.valid is False
        assert result.error == "GitHub profile fetch failed: 401"

    @pytest.mark.asyncio
    async def test_unknown_provider_is_invalid(self):
        oauth = MagicMock()
        oauth.strategy.side_effect = NotFoundError(
            "Unknown provider: gitlab. Available: github", code="unknown_provider"
        )
        handler = ValidateProviderTokenHandler(oauth_service=oauth)

        result = await handler.run(ValidateProviderToken(token="t", provider="gitlab"))

        assert result.valid is False
        assert result.error == "Unknown provider: gitlab. Available: github"

"""Provider strategies: one capability surface per OAuth provider."""

from typing import ClassVar

from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import ProviderKind, ProviderProfile, ProviderToken, UserId
from idgate.domain.auth.port.provider import OAuthClient
from idgate.domain.auth.service.identity import IdentityService
from idgate.domain.shared.service import Service


class ProviderStrategy(Service):
    """Combines a provider's network client with identity resolution.

    Subclasses only decide how a user is labelled for that provider.
    """

    _client: OAuthClient
    _identities: IdentityService

    kind: ClassVar[ProviderKind]

    @property
    def provider(self) -> ProviderKind:
        return self.kind

    def authorization_url(self, state: str) -> str:
        return self._client.authorization_url(state)

    async def exchange_code_for_token(self, code: str) -> ProviderToken:
        return await self._client.exchange_code(code)

    async def get_user_info(self, token: ProviderToken) -> ProviderProfile:
        return await self._client.fetch_profile(token)

    async def find_existing_user(self, provider_id: str) -> User | None:
        return await self._identities.find_by_provider_id(self.kind, provider_id)

    async def find_or_create_user(self, profile: ProviderProfile) -> User:
        return await self._identities.find_or_create(profile)

    async def link_account(self, user_id: UserId, profile: ProviderProfile) -> User:
        return await self._identities.link(user_id, profile)

    @classmethod
    def display_name(cls, user: User) -> str:
        return user.name or user.email or "User"


class GitHubStrategy(ProviderStrategy):
    kind = ProviderKind.GITHUB

    @classmethod
    def display_name(cls, user: User) -> str:
        return user.github_username or user.name or "GitHub User"


class GoogleStrategy(ProviderStrategy):
    kind = ProviderKind.GOOGLE

    @classmethod
    def display_name(cls, user: User) -> str:
        return user.google_email or user.email or user.name or "Google User"


_STRATEGIES: dict[ProviderKind, type[ProviderStrategy]] = {
    ProviderKind.GITHUB: GitHubStrategy,
    ProviderKind.GOOGLE: GoogleStrategy,
}


def build_strategy(client: OAuthClient, identities: IdentityService) -> ProviderStrategy:
    """Pick the strategy matching a client's provider."""
    return _STRATEGIES[client.provider](_client=client, _identities=identities)


def display_name(user: User) -> str:
    """Label a user by the provider they signed up with (GitHub wins if both)."""
    kind = ProviderKind.GITHUB if user.github_id else ProviderKind.GOOGLE
    return _STRATEGIES[kind].display_name(user)

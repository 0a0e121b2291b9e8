"""DI provider for auth infrastructure."""

import logging
from collections.abc import AsyncIterable

import httpx
from dishka import provide

from idgate.config import Config
from idgate.domain.auth.port.artifact import ArtifactAssociator
from idgate.domain.auth.port.cipher import TokenCipher
from idgate.domain.auth.port.provider import OAuthClient, ProviderRegistry
from idgate.domain.auth.port.repository import UserRepository, WhitelistRepository
from idgate.infrastructure.auth.artifact import HttpArtifactAssociator, NullArtifactAssociator
from idgate.infrastructure.auth.crypto import AesGcmTokenCipher, PlaintextTokenCipher
from idgate.infrastructure.auth.github import GitHubOAuthClient
from idgate.infrastructure.auth.google import GoogleOAuthClient
from idgate.infrastructure.auth.provider_registry import InMemoryProviderRegistry
from idgate.infrastructure.persistence.repository.user import PostgresUserRepository
from idgate.infrastructure.persistence.repository.whitelist import PostgresWhitelistRepository
from idgate.util.di.base import Provider
from idgate.util.di.scope import Scope

logger = logging.getLogger(__name__)


def http_timeout(seconds: float) -> httpx.Timeout:
    """Overall budget per provider call; connecting gets at most half of it."""
    return httpx.Timeout(seconds, connect=min(5.0, seconds / 2))


class AuthInfraProvider(Provider):
    """DI provider for auth infrastructure adapters."""

    # Repository adapters
    user_repo = provide(PostgresUserRepository, scope=Scope.UOW, provides=UserRepository)
    whitelist_repo = provide(
        PostgresWhitelistRepository,
        scope=Scope.UOW,
        provides=WhitelistRepository,
    )

    @provide(scope=Scope.APP)
    async def get_auth_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for provider and artifact calls (connection pooling)."""
        async with httpx.AsyncClient(timeout=http_timeout(config.auth.http_timeout)) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_provider_registry(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> ProviderRegistry:
        """Registry holding every provider with a configured client id."""
        clients: list[OAuthClient] = []
        if config.auth.github.client_id:
            clients.append(GitHubOAuthClient(config.auth.github, http_client))
        if config.auth.google.client_id:
            clients.append(GoogleOAuthClient(config.auth.google, http_client))

        registry = InMemoryProviderRegistry(clients)
        logger.info("OAuth providers configured: %s", registry.available_providers() or "none")
        return registry

    @provide(scope=Scope.APP)
    def get_token_cipher(self, config: Config) -> TokenCipher:
        if config.auth.encryption_key:
            return AesGcmTokenCipher(config.auth.encryption_key)
        logger.warning("IDGATE_AUTH__ENCRYPTION_KEY not set; provider tokens stored unencrypted")
        return PlaintextTokenCipher()

    @provide(scope=Scope.APP)
    def get_artifact_associator(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> ArtifactAssociator:
        if config.artifacts.associate_url:
            return HttpArtifactAssociator(config.artifacts, http_client)
        return NullArtifactAssociator()

"""OAuth provider ports."""

from abc import abstractmethod
from typing import Protocol

from idgate.domain.auth.model.value import ProviderKind, ProviderProfile, ProviderToken
from idgate.domain.shared.port import Port


class OAuthClient(Port, Protocol):
    """Network side of one OAuth provider."""

    @property
    @abstractmethod
    def provider(self) -> ProviderKind: ...

    @abstractmethod
    def authorization_url(self, state: str) -> str:
        """URL of the provider's consent page carrying our signed state."""
        ...

    @abstractmethod
    async def exchange_code(self, code: str) -> ProviderToken:
        """Trade an authorization code for an access token.

        Raises:
            ProviderAuthError: On transport failure, timeout, non-2xx status,
                an error payload or a missing access token
        """
        ...

    @abstractmethod
    async def fetch_profile(self, token: ProviderToken) -> ProviderProfile:
        """Load the user's profile with an access token.

        Raises:
            ProviderProfileError: On transport failure, timeout, non-2xx status
                or a payload without an id
        """
        ...


class ProviderRegistry(Port, Protocol):
    """Registry of configured OAuth clients."""

    @abstractmethod
    def get(self, provider: str) -> OAuthClient | None:
        """Get a configured client by provider name, None if unknown or unconfigured."""
        ...

    @abstractmethod
    def available_providers(self) -> list[str]: ...

    def is_available(self, provider: str) -> bool:
        return provider in self.available_providers()

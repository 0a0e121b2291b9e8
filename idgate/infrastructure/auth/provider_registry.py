"""Provider registry implementation."""

from idgate.domain.auth.port.provider import OAuthClient, ProviderRegistry


class InMemoryProviderRegistry(ProviderRegistry):
    """Maps provider names to configured OAuth clients.

    Only providers with credentials are registered, at startup via DI.
    """

    def __init__(self, clients: list[OAuthClient] | None = None) -> None:
        self._clients: dict[str, OAuthClient] = {str(c.provider): c for c in clients or []}

    def get(self, provider: str) -> OAuthClient | None:
        return self._clients.get(provider)

    def available_providers(self) -> list[str]:
        return list(self._clients)

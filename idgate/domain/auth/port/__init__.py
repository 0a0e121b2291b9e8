"""Auth domain ports."""

from .artifact import ArtifactAssociator, AssociationOutcome
from .cipher import TokenCipher
from .provider import OAuthClient, ProviderRegistry
from .repository import UserRepository, WhitelistRepository

__all__ = [
    "ArtifactAssociator",
    "AssociationOutcome",
    "OAuthClient",
    "ProviderRegistry",
    "TokenCipher",
    "UserRepository",
    "WhitelistRepository",
]

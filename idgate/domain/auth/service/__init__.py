"""Auth domain services."""

from .guard import AccessGuard
from .identity import IdentityService
from .oauth import CallbackOutcome, CallbackStage, LinkOutcome, OAuthService
from .provider import GitHubStrategy, GoogleStrategy, ProviderStrategy, build_strategy
from .token import TokenService
from .whitelist import WhitelistService

__all__ = [
    "AccessGuard",
    "CallbackOutcome",
    "CallbackStage",
    "GitHubStrategy",
    "GoogleStrategy",
    "IdentityService",
    "LinkOutcome",
    "OAuthService",
    "ProviderStrategy",
    "TokenService",
    "WhitelistService",
    "build_strategy",
]

"""Auth domain models."""

from .claims import AccessClaims
from .identity import Anonymous, Identity
from .principal import Principal
from .state import OAuthState
from .user import User, merge_users, order_for_merge, union_emails
from .value import ProviderKind, ProviderProfile, ProviderToken, UserId, normalize_email
from .whitelist import WhitelistChange, WhitelistEntry, WhitelistRemoval

__all__ = [
    "AccessClaims",
    "Anonymous",
    "Identity",
    "OAuthState",
    "Principal",
    "ProviderKind",
    "ProviderProfile",
    "ProviderToken",
    "User",
    "UserId",
    "WhitelistChange",
    "WhitelistEntry",
    "WhitelistRemoval",
    "merge_users",
    "normalize_email",
    "order_for_merge",
    "union_emails",
]

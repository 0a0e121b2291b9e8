"""Auth domain queries."""

from .current_user import CurrentUserResult, GetCurrentUser, GetCurrentUserHandler
from .validate_token import (
    ValidateProviderToken,
    ValidateProviderTokenHandler,
    ValidateProviderTokenResult,
)
from .whitelist import ListWhitelist, ListWhitelistHandler, ListWhitelistResult, WhitelistItem

__all__ = [
    "CurrentUserResult",
    "GetCurrentUser",
    "GetCurrentUserHandler",
    "ListWhitelist",
    "ListWhitelistHandler",
    "ListWhitelistResult",
    "ValidateProviderToken",
    "ValidateProviderTokenHandler",
    "ValidateProviderTokenResult",
    "WhitelistItem",
]

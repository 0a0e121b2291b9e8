"""Auth domain commands."""

from .login import (
    CompleteOAuth,
    CompleteOAuthHandler,
    CompleteOAuthResult,
    GetAuthorizationUrl,
    GetAuthorizationUrlHandler,
    GetAuthorizationUrlResult,
)
from .whitelist import (
    AddWhitelistEmails,
    AddWhitelistEmailsHandler,
    AddWhitelistEmailsResult,
    RemoveWhitelistEmails,
    RemoveWhitelistEmailsHandler,
    RemoveWhitelistEmailsResult,
)

__all__ = [
    "AddWhitelistEmails",
    "AddWhitelistEmailsHandler",
    "AddWhitelistEmailsResult",
    "CompleteOAuth",
    "CompleteOAuthHandler",
    "CompleteOAuthResult",
    "GetAuthorizationUrl",
    "GetAuthorizationUrlHandler",
    "GetAuthorizationUrlResult",
    "RemoveWhitelistEmails",
    "RemoveWhitelistEmailsHandler",
    "RemoveWhitelistEmailsResult",
]

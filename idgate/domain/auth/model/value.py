"""Value objects for the auth domain."""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from pydantic import RootModel

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class UserId(RootModel[UUID]):
    """Unique identifier for a User."""

    @classmethod
    def generate(cls) -> "UserId":
        return cls(uuid4())

    @classmethod
    def parse(cls, value: str) -> "UserId":
        """Parse a user id from its string form.

        Raises:
            ValueError: If the value is not a UUID
        """
        return cls(UUID(value))

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class ProviderKind(StrEnum):
    """OAuth providers a user can sign in with."""

    GITHUB = "github"
    GOOGLE = "google"

    @property
    def label(self) -> str:
        return "GitHub" if self is ProviderKind.GITHUB else "Google"


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email address. None becomes the empty string."""
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """Shape check only: something@something.tld without whitespace."""
    return bool(EMAIL_PATTERN.match(email))


@dataclass(frozen=True)
class ProviderProfile:
    """Normalized user profile returned by an OAuth provider.

    Empty strings mean the provider did not supply the field.
    """

    provider: ProviderKind
    provider_id: str
    email: str = ""
    name: str = ""
    avatar_url: str = ""
    username: str = ""  # GitHub login; unused for Google
    access_token: str = ""
    expires_at: datetime | None = None


@dataclass(frozen=True)
class ProviderToken:
    """Access token obtained from a provider's token endpoint."""

    access_token: str
    expires_at: datetime | None = None

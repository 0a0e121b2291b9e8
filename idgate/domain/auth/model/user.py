"""User aggregate for the auth domain."""

from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import Field

from idgate.domain.auth.model.value import (
    ProviderKind,
    ProviderProfile,
    UserId,
    normalize_email,
)
from idgate.domain.shared.error import AlreadyLinkedError
from idgate.domain.shared.model.entity import Aggregate


class User(Aggregate):
    """A person known to the gateway through one or two OAuth providers.

    Unset string fields hold "" rather than None.

    Invariants:
    - `id` and `created_at` are immutable after creation
    - at most one User holds a given `github_id` / `google_id` (enforced by the store)
    - `emails` is lower-cased, trimmed and free of duplicates
    """

    id: UserId
    github_id: str = ""
    github_username: str = ""
    google_id: str = ""
    google_email: str = ""
    email: str = ""
    emails: list[str] = Field(default_factory=list)
    name: str = ""
    avatar_url: str = ""
    admin: bool = False
    github_access_token: str = ""
    github_token_expires_at: datetime | None = None
    google_access_token: str = ""
    google_token_expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_profile(cls, profile: ProviderProfile) -> "User":
        """Create a new user seeded from a provider profile."""
        user = cls(id=UserId.generate(), created_at=datetime.now(UTC))
        user.attach(profile)
        return user

    def provider_id(self, provider: ProviderKind) -> str:
        return self.github_id if provider is ProviderKind.GITHUB else self.google_id

    def attach(self, profile: ProviderProfile) -> None:
        """Set the provider identity fields from a profile.

        Raises:
            AlreadyLinkedError: If the user already holds a different id for this provider
        """
        current = self.provider_id(profile.provider)
        if current and current != profile.provider_id:
            raise AlreadyLinkedError(
                f"A different {profile.provider.label} account is already linked to this user"
            )

        if profile.provider is ProviderKind.GITHUB:
            self.github_id = profile.provider_id
            self.github_username = profile.username or self.github_username
        else:
            self.google_id = profile.provider_id
            self.google_email = normalize_email(profile.email) or self.google_email
        self.absorb(profile)

    def absorb(self, profile: ProviderProfile) -> None:
        """Fill empty display fields, add the profile email and store the latest token."""
        email = normalize_email(profile.email)
        if not self.email:
            self.email = email
        if not self.name:
            self.name = profile.name
        if not self.avatar_url:
            self.avatar_url = profile.avatar_url
        if profile.provider is ProviderKind.GOOGLE and not self.google_email:
            self.google_email = email
        self.emails = union_emails(self.emails, [email])

        if profile.access_token:
            if profile.provider is ProviderKind.GITHUB:
                self.github_access_token = profile.access_token
                self.github_token_expires_at = profile.expires_at
            else:
                self.google_access_token = profile.access_token
                self.google_token_expires_at = profile.expires_at

    def known_emails(self) -> list[str]:
        """Addresses to test against the whitelist, in priority order.

        The email set wins; the primary email is only a fallback when the set
        is empty. A Google email not yet merged into the set is always included.
        """
        base = self.emails or [self.email]
        return union_emails(base, [self.google_email])

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)


def union_emails(*groups: Iterable[str]) -> list[str]:
    """Case-insensitive ordered union of email groups, dropping blanks."""
    seen: dict[str, None] = {}
    for group in groups:
        for email in group:
            normalized = normalize_email(email)
            if normalized:
                seen.setdefault(normalized, None)
    return list(seen)


def order_for_merge(a: User, b: User) -> tuple[User, User]:
    """Return (primary, secondary): the older account always survives.

    Equal timestamps fall back to the id so the choice never depends on
    which side initiated the link.
    """
    if (a.created_at, str(a.id)) <= (b.created_at, str(b.id)):
        return a, b
    return b, a


def merge_users(primary: User, secondary: User) -> User:
    """Fold the secondary's fields into a copy of the primary.

    A field is copied only when the primary's value is empty. Provider ids
    travel together with their username/email and token. Email sets are
    unioned. Admin is kept if either account had it.
    """
    update: dict = {}

    if not primary.github_id and secondary.github_id:
        update.update(
            github_id=secondary.github_id,
            github_username=secondary.github_username,
            github_access_token=secondary.github_access_token,
            github_token_expires_at=secondary.github_token_expires_at,
        )
    if not primary.google_id and secondary.google_id:
        update.update(
            google_id=secondary.google_id,
            google_email=secondary.google_email,
            google_access_token=secondary.google_access_token,
            google_token_expires_at=secondary.google_token_expires_at,
        )
    for field in ("email", "name", "avatar_url"):
        if not getattr(primary, field) and getattr(secondary, field):
            update[field] = getattr(secondary, field)

    update["emails"] = union_emails(primary.emails, secondary.emails)
    update["admin"] = primary.admin or secondary.admin
    return primary.model_copy(update=update, deep=True)

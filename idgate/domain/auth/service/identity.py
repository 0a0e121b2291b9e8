"""Identity resolution: find-or-create, provider linking and account merging."""

import logging

from idgate.domain.auth.model.user import User, merge_users, order_for_merge
from idgate.domain.auth.model.value import ProviderKind, ProviderProfile, UserId
from idgate.domain.auth.port.repository import UserRepository
from idgate.domain.shared.error import AlreadyLinkedError, UserNotFoundError
from idgate.domain.shared.service import Service

logger = logging.getLogger(__name__)


def already_linked(provider: ProviderKind) -> AlreadyLinkedError:
    return AlreadyLinkedError(
        f"This {provider.label} account is already associated with another account"
    )


class IdentityService(Service):
    """Owns every write to the User aggregate.

    Provider-id uniqueness is ultimately enforced by the repository; this
    service turns a lost race into AlreadyLinkedError or, for fresh logins,
    into a re-read of the winning row.
    """

    _users: UserRepository

    async def get(self, user_id: UserId) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return user

    async def find_by_provider_id(self, provider: ProviderKind, provider_id: str) -> User | None:
        return await self._users.find_by_provider_id(provider, provider_id)

    async def find_or_create(self, profile: ProviderProfile) -> User:
        """Resolve a fresh login to a user. Same provider id, same user."""
        existing = await self.find_by_provider_id(profile.provider, profile.provider_id)
        if existing is not None:
            return await self._refresh(existing, profile)

        user = User.from_profile(profile)
        try:
            await self._users.create(user)
        except AlreadyLinkedError:
            # A concurrent login for the same profile created the row first
            winner = await self.find_by_provider_id(profile.provider, profile.provider_id)
            if winner is None:
                raise
            logger.info(
                "Concurrent signup for %s id=%s resolved to user %s",
                profile.provider,
                profile.provider_id,
                winner.id,
            )
            return await self._refresh(winner, profile)

        logger.info("Created user %s from %s profile", user.id, profile.provider)
        return user

    async def link(self, user_id: UserId, profile: ProviderProfile) -> User:
        """Attach a provider identity to an existing user.

        Raises:
            UserNotFoundError: If the user does not exist
            AlreadyLinkedError: If the provider id belongs to another user, or the
                user already holds a different id for this provider
        """
        owner = await self.find_by_provider_id(profile.provider, profile.provider_id)
        if owner is not None:
            if owner.id != user_id:
                raise already_linked(profile.provider)
            return owner

        user = await self.get(user_id)
        user.attach(profile)
        user.touch()
        try:
            await self._users.update(user)
        except AlreadyLinkedError as e:
            raise already_linked(profile.provider) from e

        logger.info("Linked %s id=%s to user %s", profile.provider, profile.provider_id, user.id)
        return user

    async def merge(self, primary_candidate_id: UserId, secondary_id: UserId) -> User:
        """Merge two users that turned out to be the same person.

        The older account survives whichever side initiated the link. The
        secondary row is deleted before the primary is written so the provider
        ids it held are free; both writes share one transaction.

        Raises:
            UserNotFoundError: If either user does not exist
        """
        first = await self.get(primary_candidate_id)
        if primary_candidate_id == secondary_id:
            return first
        second = await self.get(secondary_id)

        primary, secondary = order_for_merge(first, second)
        merged = merge_users(primary, secondary)
        merged.touch()

        async with self._users.transaction():
            await self._users.delete(secondary.id)
            await self._users.update(merged)

        logger.info(
            "Merged user %s into %s (github_id=%s, google_id=%s, emails=%d)",
            secondary.id,
            merged.id,
            merged.github_id or "-",
            merged.google_id or "-",
            len(merged.emails),
        )
        return merged

    async def _refresh(self, user: User, profile: ProviderProfile) -> User:
        user.absorb(profile)
        user.touch()
        await self._users.update(user)
        return user

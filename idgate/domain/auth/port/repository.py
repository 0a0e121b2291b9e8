"""Repository ports for the auth domain."""

from abc import abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import ProviderKind, UserId
from idgate.domain.auth.model.whitelist import WhitelistEntry
from idgate.domain.shared.port import Port


class UserRepository(Port, Protocol):
    """Persistence for the User aggregate.

    Implementations must enforce uniqueness of provider ids at write time and
    report a violation as AlreadyLinkedError, leaving storage untouched.
    """

    @abstractmethod
    async def get(self, user_id: UserId) -> User | None:
        """Get a user by ID."""
        ...

    @abstractmethod
    async def find_by_provider_id(self, provider: ProviderKind, provider_id: str) -> User | None:
        """Get the user holding a provider id, if any."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Get the first user whose primary email or email set contains the address."""
        ...

    @abstractmethod
    async def create(self, user: User) -> None:
        """Insert a new user.

        Raises:
            AlreadyLinkedError: If a provider id on the user is held by another user
        """
        ...

    @abstractmethod
    async def update(self, user: User) -> None:
        """Overwrite an existing user.

        Raises:
            AlreadyLinkedError: If a provider id on the user is held by another user
        """
        ...

    @abstractmethod
    async def delete(self, user_id: UserId) -> bool:
        """Delete a user. Returns False if there was nothing to delete."""
        ...

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Atomic unit: every write inside commits together or not at all."""
        ...


class WhitelistRepository(Port, Protocol):
    """Persistence for whitelist entries. Emails arrive already normalized."""

    @abstractmethod
    async def exists(self, email: str) -> bool: ...

    @abstractmethod
    async def add(self, email: str) -> bool:
        """Insert an entry. Returns False if it was already present."""
        ...

    @abstractmethod
    async def remove(self, email: str) -> bool:
        """Delete an entry. Returns False if it was not present."""
        ...

    @abstractmethod
    async def list_all(self) -> list[WhitelistEntry]:
        """All entries ordered by email."""
        ...

"""SQL repository for the User aggregate."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import ProviderKind, UserId, normalize_email
from idgate.domain.auth.port.cipher import TokenCipher
from idgate.domain.auth.port.repository import UserRepository
from idgate.domain.shared.error import AlreadyLinkedError
from idgate.infrastructure.persistence.columns import ensure_utc
from idgate.infrastructure.persistence.tables import users_table

logger = logging.getLogger(__name__)


def _row_to_user(row: dict[str, Any], cipher: TokenCipher) -> User:
    """Convert a database row to a User model."""
    return User(
        id=UserId.parse(row["id"]),
        github_id=row["github_id"] or "",
        github_username=row["github_username"] or "",
        google_id=row["google_id"] or "",
        google_email=row["google_email"] or "",
        email=row["email"] or "",
        emails=list(row["emails"] or []),
        name=row["name"] or "",
        avatar_url=row["avatar_url"] or "",
        admin=bool(row["admin"]),
        github_access_token=cipher.decrypt(row["github_access_token"] or ""),
        github_token_expires_at=ensure_utc(row["github_token_expires_at"]),
        google_access_token=cipher.decrypt(row["google_access_token"] or ""),
        google_token_expires_at=ensure_utc(row["google_token_expires_at"]),
        created_at=ensure_utc(row["created_at"]),
        updated_at=ensure_utc(row["updated_at"]),
    )


def _user_to_dict(user: User, cipher: TokenCipher) -> dict[str, Any]:
    """Convert a User model to a database row dict. Empty strings become NULL."""
    return {
        "id": str(user.id),
        "github_id": user.github_id or None,
        "github_username": user.github_username or None,
        "google_id": user.google_id or None,
        "google_email": user.google_email or None,
        "email": user.email or None,
        "emails": list(user.emails),
        "name": user.name or None,
        "avatar_url": user.avatar_url or None,
        "admin": user.admin,
        "github_access_token": cipher.encrypt(user.github_access_token) or None,
        "github_token_expires_at": user.github_token_expires_at,
        "google_access_token": cipher.encrypt(user.google_access_token) or None,
        "google_token_expires_at": user.google_token_expires_at,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class PostgresUserRepository(UserRepository):
    """SQL implementation of UserRepository (PostgreSQL in production, SQLite locally).

    Writes run inside a SAVEPOINT so a unique-constraint violation on a
    provider id rolls back only that write and surfaces as AlreadyLinkedError.
    """

    def __init__(self, session: AsyncSession, cipher: TokenCipher) -> None:
        self.session = session
        self.cipher = cipher

    async def get(self, user_id: UserId) -> User | None:
        stmt = select(users_table).where(users_table.c.id == str(user_id))
        return await self._fetch_one(stmt)

    async def find_by_provider_id(self, provider: ProviderKind, provider_id: str) -> User | None:
        if not provider_id:
            return None
        column = (
            users_table.c.github_id
            if provider is ProviderKind.GITHUB
            else users_table.c.google_id
        )
        stmt = select(users_table).where(column == provider_id)
        return await self._fetch_one(stmt)

    async def find_by_email(self, email: str) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        stmt = (
            select(users_table)
            .where(or_(users_table.c.email == normalized, users_table.c.google_email == normalized))
            .order_by(users_table.c.created_at)
        )
        user = await self._fetch_one(stmt)
        if user is not None:
            return user

        # The email set is JSON; scan it rather than rely on dialect-specific operators
        result = await self.session.execute(select(users_table).order_by(users_table.c.created_at))
        for row in result.mappings():
            if normalized in (row["emails"] or []):
                return _row_to_user(dict(row), self.cipher)
        return None

    async def create(self, user: User) -> None:
        await self._write(insert(users_table).values(**_user_to_dict(user, self.cipher)), user)

    async def update(self, user: User) -> None:
        values = _user_to_dict(user, self.cipher)
        values.pop("id")
        values.pop("created_at")
        stmt = update(users_table).where(users_table.c.id == str(user.id)).values(**values)
        await self._write(stmt, user)

    async def delete(self, user_id: UserId) -> bool:
        result = await self.session.execute(
            delete(users_table).where(users_table.c.id == str(user_id))
        )
        await self.session.flush()
        return result.rowcount > 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self.session.begin_nested():
            yield

    async def _fetch_one(self, stmt: Any) -> User | None:
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_user(dict(row), self.cipher) if row else None

    async def _write(self, stmt: Any, user: User) -> None:
        try:
            async with self.session.begin_nested():
                await self.session.execute(stmt)
        except IntegrityError as e:
            logger.info(
                "Provider id already taken writing user %s (github_id=%s, google_id=%s)",
                user.id,
                user.github_id or "-",
                user.google_id or "-",
            )
            raise AlreadyLinkedError() from e

"""SQL repository for whitelist entries."""

from datetime import UTC, datetime

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from idgate.domain.auth.model.whitelist import WhitelistEntry
from idgate.domain.auth.port.repository import WhitelistRepository
from idgate.infrastructure.persistence.columns import ensure_utc
from idgate.infrastructure.persistence.tables import whitelist_table


class PostgresWhitelistRepository(WhitelistRepository):
    """SQL implementation of WhitelistRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists(self, email: str) -> bool:
        stmt = select(whitelist_table.c.email).where(whitelist_table.c.email == email)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add(self, email: str) -> bool:
        if await self.exists(email):
            return False
        stmt = insert(whitelist_table).values(email=email, created_at=datetime.now(UTC))
        try:
            async with self.session.begin_nested():
                await self.session.execute(stmt)
        except IntegrityError:
            # Added concurrently by another request
            return False
        return True

    async def remove(self, email: str) -> bool:
        result = await self.session.execute(
            delete(whitelist_table).where(whitelist_table.c.email == email)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def list_all(self) -> list[WhitelistEntry]:
        result = await self.session.execute(
            select(whitelist_table).order_by(whitelist_table.c.email)
        )
        return [
            WhitelistEntry(
                email=row["email"],
                created_at=ensure_utc(row["created_at"]),
            )
            for row in result.mappings()
        ]

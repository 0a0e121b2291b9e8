"""Fixtures backed by an in-memory SQLite database."""

import pytest_asyncio

from idgate.infrastructure.persistence.database import create_db_engine, create_session_factory
from idgate.infrastructure.persistence.tables import metadata
from tests.factories import make_sqlite_config


@pytest_asyncio.fixture
async def engine():
    engine = create_db_engine(make_sqlite_config())
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session

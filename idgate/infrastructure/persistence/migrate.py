"""Database migration utilities.

Migrations are run synchronously at startup before the async server starts.
This keeps the async/sync boundary clean.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger(__name__)

# Project root where alembic.ini lives
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def to_sync_url(database_url: str) -> str:
    """Convert async database URL to its sync equivalent for Alembic.

    - sqlite+aiosqlite:///~/x.db -> sqlite:////home/me/x.db
    - postgresql+asyncpg://...   -> postgresql://...
    """
    url = database_url.replace("+aiosqlite", "").replace("+asyncpg", "")
    if url.startswith("sqlite:///") and ":memory:" not in url:
        path = url[len("sqlite:///") :]
        url = f"sqlite:///{Path(path).expanduser()}"
    return url


def get_alembic_config(database_url: str) -> AlembicConfig:
    """Create Alembic config with the given database URL."""
    alembic_ini = PROJECT_ROOT / "alembic.ini"
    config = AlembicConfig(str(alembic_ini) if alembic_ini.exists() else None)
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", to_sync_url(database_url))
    config.set_main_option("configure_logging", "false")
    return config


def run_migrations(database_url: str) -> None:
    """Run pending Alembic migrations up to head."""
    sync_url = to_sync_url(database_url)

    if sync_url.startswith("sqlite:///") and ":memory:" not in sync_url:
        Path(sync_url[len("sqlite:///") :]).parent.mkdir(parents=True, exist_ok=True)

    command.upgrade(get_alembic_config(database_url), "head")
    logger.info("Database migrations complete")

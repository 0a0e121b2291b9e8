"""Alembic environment.

The database URL is injected by idgate.infrastructure.persistence.migrate;
running `alembic` by hand falls back to IDGATE_DATABASE__URL.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from idgate.config import Config
from idgate.infrastructure.persistence.migrate import to_sync_url
from idgate.infrastructure.persistence.tables import metadata

config = context.config

# Skipped when called from the server so its logging setup stays intact
configure_logging = config.get_main_option("configure_logging", "true") == "true"
if config.config_file_name is not None and configure_logging:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", to_sync_url(Config().database.url))

target_metadata = metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a live connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        # Batch mode lets ALTER-style operations work on SQLite
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

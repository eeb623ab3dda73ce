"""Alembic migration environment for LinkFolio."""

import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from linkfolio.db import models  # noqa: F401  registers tables on Base.metadata
from linkfolio.db.database import Base

config = context.config

# Programmatic configs (no ini file) keep the URL they were given
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
    database_url = os.environ.get("LINKFOLIO_DATABASE_URL") or os.environ.get(
        "DATABASE_URL"
    )
    if database_url:
        config.set_main_option("sqlalchemy.url", database_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL for the configured URL."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=True,
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

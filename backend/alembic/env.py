"""
Alembic environment for the inventory schema (listings, room
configurations, bookings).

The URL comes from DATABASE_URL_SYNC. Against SQLite, migrations run in
batch mode: ALTERs that touch the CHECK constraints on room_configurations
and bookings need a table rebuild there.
"""

from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from pg_inventory.db.base import Base
from pg_inventory.models import Listing, RoomConfiguration, Booking  # noqa: F401 - register tables on Base.metadata
from pg_inventory.core.config import get_settings

config = context.config
settings = get_settings()

config.set_main_option("sqlalchemy.url", settings.DATABASE_URL_SYNC)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        # available_rooms holds beds, so a type change there must show up in autogenerate
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit the inventory DDL as a SQL script."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply pending revisions to the configured database."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            **_configure_options(str(connection.engine.url)),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

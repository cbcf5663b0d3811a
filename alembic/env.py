"""Alembic environment configuration.

Reads the database URL from speakerhub.config and registers all models
so autogenerate can detect schema changes.
"""
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from speakerhub.config import settings
from speakerhub.database import Base

# Import all models so they register with Base.metadata
from speakerhub.models.profile import Profile            # noqa: F401
from speakerhub.models.speaker import Speaker            # noqa: F401
from speakerhub.models.event import Event                # noqa: F401
from speakerhub.models.invitation import Invitation      # noqa: F401
from speakerhub.models.booking import Booking            # noqa: F401
from speakerhub.models.status_change import StatusChange  # noqa: F401
from speakerhub.models.notification import Notification  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
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
        # render_as_batch lets ALTERs work on SQLite dev databases
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

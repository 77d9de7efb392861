"""
Alembic Environment Configuration
=================================

This file connects Alembic with:

- The configured database provider (SQLite, MySQL or Postgres)
- SQLAlchemy models metadata

It allows Alembic to:
- Detect model changes
- Generate migrations automatically
"""

from logging.config import fileConfig
from alembic import context

# Import provider factory and Base metadata
from reportflow.db.base import Base
from reportflow.db.providers import get_database_provider

# Import models so Alembic can detect them
import reportflow.models  # noqa: F401


# Alembic Config object
config = context.config

# Database URL comes from the provider, not from alembic.ini
provider = get_database_provider()
config.set_main_option(
    "sqlalchemy.url",
    provider.build_url().render_as_string(hide_password=False).replace("%", "%%"),
)

# Configure logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Tell Alembic where models metadata is
target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place
render_as_batch = provider.name == "sqlite"


def run_migrations_offline():
    """
    Run migrations in offline mode.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=render_as_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """
    Run migrations in online mode.
    """
    connectable = provider.engine

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

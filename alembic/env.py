import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text, create_engine

from app.core.config import settings
from app.db.base import Base  # every model registered on the metadata


def ensure_alembic_version_table(connection) -> None:
    # Alembic defaults alembic_version.version_num to VARCHAR(32); keep room for descriptive revision ids.
    connection.execute(
        text("CREATE TABLE IF NOT EXISTS alembic_version (version_num VARCHAR(64) NOT NULL);")
    )
    if connection.dialect.name == "postgresql":
        connection.execute(text("ALTER TABLE alembic_version ALTER COLUMN version_num TYPE VARCHAR(64);"))


config = context.config

# sqlalchemy.url always comes from the runtime settings, never from alembic.ini
db_url = settings.DATABASE_URL or os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL is not set (check .env / app.core.config.settings)")
config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(config.get_main_option("sqlalchemy.url"), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        # configure() before any DDL, or begin_transaction() never commits.
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            ensure_alembic_version_table(connection)
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

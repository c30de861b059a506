"""
Migration runner. The database URL comes from `sqlalchemy.url` when the caller set one
(tests, scripted upgrades), otherwise from DATABASE_URL via Settings.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from videoshare.config import get_settings
from videoshare.database import Base
from videoshare.models import User, Video  # noqa: F401 - register tables on Base.metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_settings().require_database_url()


def _configure_options(url: str) -> dict:
    # SQLite cannot ALTER most columns in place; batch mode recreates the table
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    url = _database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _database_url()
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_configure_options(url))
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

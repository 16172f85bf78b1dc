import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

# configs loads .env on import
from configs import Config, db
from db.models import *  # noqa: F401,F403  registers every table on db.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

db_url = Config.SQLALCHEMY_DATABASE_URI
if not db_url:
    raise RuntimeError("DATABASE_URL is not set. Check your .env")
config.set_main_option("sqlalchemy.url", db_url)

target_metadata = db.metadata


def _options(url: str) -> dict:
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        # SQLite cannot ALTER most columns; batch mode rebuilds the table
        render_as_batch=url.startswith("sqlite"),
        process_revision_directives=_skip_empty,
    )


def _skip_empty(context_, revision, directives):
    if getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info("No schema changes detected, revision skipped")


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options(url),
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
        context.configure(connection=connection, **_options(db_url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

import os
from logging.config import fileConfig

from alembic import context
from backend_common.database import ensure_sync_url
from sqlalchemy import engine_from_config, pool

from workout_ai_service import models  # noqa: F401
from workout_ai_service.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


db_url = os.getenv("WORKOUT_AI_DATABASE_URL")
if not db_url:
    raise ValueError("WORKOUT_AI_DATABASE_URL environment variable not set")

config.set_main_option("sqlalchemy.url", ensure_sync_url(db_url))

target_metadata = Base.metadata


def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

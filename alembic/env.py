"""Alembic environment for the clinic schema.

The URL comes from the same settings the app uses, so `alembic upgrade head`
migrates whatever DATABASE_URL points at.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from rural_health.config import get_settings
from rural_health.database import Base
import rural_health.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = get_settings().database_url


if context.is_offline_mode():
    context.configure(url=database_url, target_metadata=Base.metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()
else:
    connectable = create_engine(database_url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        # SQLite can only ALTER through table copies
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()

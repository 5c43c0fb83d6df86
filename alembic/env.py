"""Alembic environment — runs migrations against mission_control's engine."""
import importlib
from logging.config import fileConfig

from alembic import context

from mission_control.database import Base, engine, url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

for module in ('team_member', 'import_record', 'activity', 'prospect'):
    importlib.import_module(f'mission_control.models.{module}')

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

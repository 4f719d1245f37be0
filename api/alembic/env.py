from alembic import context
from sqlmodel import SQLModel
from lexitrack.core.config import settings
from lexitrack.core.database import engine, normalize_database_url

# Import all models here so Alembic can detect them
from lexitrack.models import (  # noqa: F401
    User,
    Lexeme,
    LearningProgress,
)

config = context.config

config.set_main_option("sqlalchemy.url", normalize_database_url(settings.database_url))

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    with engine.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

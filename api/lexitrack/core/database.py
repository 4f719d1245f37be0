from contextlib import contextmanager
from typing import Iterator
from sqlmodel import SQLModel, create_engine, Session, text
from sqlalchemy.pool import StaticPool
from lexitrack.core.config import settings
import logging

logger = logging.getLogger(__name__)


def normalize_database_url(db_url: str) -> str:
    """SQLAlchemy prefers postgresql:// over postgres://."""
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


def build_engine(db_url: str):
    """
    Create a pooled engine for the given URL.

    SQLite (used for local runs and tests) does not accept the QueuePool sizing
    arguments, and in-memory SQLite must share a single connection.
    """
    db_url = normalize_database_url(db_url)
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)

    return create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


logger.info(f"Connecting to database: {normalize_database_url(settings.database_url)[:20]}...")

engine = build_engine(settings.database_url)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session owned by a background job; always closed on exit."""
    with Session(engine) as session:
        yield session


def init_db():
    """Initialize database tables, unique constraints and indexes."""
    # Tables register themselves on import
    from lexitrack import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def check_connection() -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        with Session(engine) as session:
            return session.exec(text("SELECT 1")).first()[0] == 1
    except Exception as e:
        logger.error(f"Database connection test failed: {str(e)}")
        return False

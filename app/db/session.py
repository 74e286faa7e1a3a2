"""
Primary store session management using SQLModel.
Provides the engine, a session factory for background jobs and the
session dependency for FastAPI routes.
"""

from typing import Callable, Generator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401  registers the users/products tables
from app.core.config import settings

SessionFactory = Callable[[], Session]


def build_engine(uri: str) -> Engine:
    """Create an engine with settings suited to the backend."""
    if uri.startswith("sqlite"):
        # SQLite-specific configuration
        return create_engine(
            uri,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},  # Shared across worker threads
        )
    # PostgreSQL configuration with connection pooling
    return create_engine(
        uri,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(settings.SQLALCHEMY_DATABASE_URI)


def init_db(bind: Engine) -> None:
    """Create the users and products tables if they do not exist."""
    SQLModel.metadata.create_all(bind)


def session_factory(bind: Engine) -> SessionFactory:
    """Return a callable opening new sessions on ``bind``."""

    def _open() -> Session:
        return Session(bind)

    return _open


def get_session() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session for FastAPI routes.

    Yields:
        Database session instance
    """
    with Session(engine) as session:
        yield session

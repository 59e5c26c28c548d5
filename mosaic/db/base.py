"""Engine, session factory and declarative base for the placement store."""

import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


def _database_url() -> str:
    url = os.getenv("DATABASE_URL", "sqlite:///./mosaic.db")
    # Heroku-style URLs are not accepted by SQLAlchemy 1.4+
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


DATABASE_URL = _database_url()


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    SQLite connections are shared across threads because commits run in the
    request thread pool. An in-memory SQLite database is pinned to a single
    connection, otherwise every connection would see its own empty database.
    """
    echo = os.getenv("SQL_ECHO", "false").lower() == "true"
    if not url.startswith("sqlite"):
        return create_engine(url, pool_size=10, max_overflow=20, pool_pre_ping=True, echo=echo)

    options = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator:
    """Request-scoped database session.

    Yields:
        Database session, closed when the request finishes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create the placement tables if they do not exist."""
    from mosaic.db import models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind: Engine | None = None) -> None:
    """Drop the placement tables."""
    Base.metadata.drop_all(bind=bind or engine)

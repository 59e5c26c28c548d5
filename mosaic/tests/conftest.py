"""Pytest configuration and fixtures."""

import os
import tempfile

# Keep the app module's default engine and image directory out of the working tree.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("IMAGE_DIR", tempfile.mkdtemp(prefix="mosaic-images-"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mosaic.auth import AdminAuthorizer, hash_password
from mosaic.auth.brute_force import _reset_for_testing
from mosaic.db.base import Base, init_db
from mosaic.events import EventBus
from mosaic.geometry import Rect
from mosaic.placements import PlacementGuard
from mosaic.storage import LocalImageStore

ADMIN_SECRET = "let-me-delete"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(scope="session")
def admin_hash() -> str:
    """Admin secret hashed once per run, at a low cost factor."""
    return hash_password(ADMIN_SECRET, rounds=4)


@pytest.fixture(autouse=True)
def reset_lockouts():
    _reset_for_testing()
    yield
    _reset_for_testing()


@pytest.fixture(scope="function")
def session_factory():
    """Thread-safe in-memory SQLite sessions."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed SQLite, one connection per thread, for concurrency tests."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'mosaic.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    init_db(bind=engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def image_store(tmp_path) -> LocalImageStore:
    return LocalImageStore(tmp_path / "images", public_base_url="/api/v1/images", max_bytes=1024)


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def guard(session_factory, image_store, admin_hash, events) -> PlacementGuard:
    return PlacementGuard(
        session_factory=session_factory,
        image_store=image_store,
        authorizer=AdminAuthorizer(admin_hash),
        events=events,
    )


@pytest.fixture
def tile_a() -> Rect:
    """The reference tile at the origin."""
    return Rect(x=0, y=0, w=100, h=100)

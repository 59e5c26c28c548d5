"""Database module for the mosaic."""

from mosaic.db.base import Base, get_db, engine, SessionLocal, init_db, drop_db
from mosaic.db.models import Placement

__all__ = [
    "Base",
    "get_db",
    "engine",
    "SessionLocal",
    "init_db",
    "drop_db",
    "Placement",
]

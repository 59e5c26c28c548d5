"""Database models for the mosaic."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, Float, Index, String, Text

from mosaic.db.base import Base
from mosaic.geometry import Rect


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid4())


class Placement(Base):
    """A committed tile: a rectangle on the wall plus its image."""

    __tablename__ = "placements"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    image_ref = Column(String(1024), nullable=False)
    caption = Column(Text, nullable=False, default="")

    # Geometry in world units
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    w = Column(Float, nullable=False)
    h = Column(Float, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_placements_x_y", "x", "y"),
    )

    def __repr__(self) -> str:
        return f"<Placement {self.id} ({self.x}, {self.y}, {self.w}x{self.h})>"

    @property
    def rect(self) -> Rect:
        """Geometry as the canonical value type."""
        return Rect(x=self.x, y=self.y, w=self.w, h=self.h)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.image_ref,
            "caption": self.caption or "",
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

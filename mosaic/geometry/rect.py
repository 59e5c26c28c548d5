"""Canonical rectangle value type shared by ghosts, placements and the viewport.

All coordinates are world units. At authoring scale one unit is one pixel.
"""

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mosaic.errors import InvalidGeometry


class Point(NamedTuple):
    """A position in world or screen coordinates."""

    x: float
    y: float


class Size(NamedTuple):
    """A width/height pair."""

    w: float
    h: float


class Rect(BaseModel):
    """Axis-aligned rectangle with a strictly positive size."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(allow_inf_nan=False, description="Left edge")
    y: float = Field(allow_inf_nan=False, description="Top edge")
    w: float = Field(gt=0, allow_inf_nan=False, description="Width")
    h: float = Field(gt=0, allow_inf_nan=False, description="Height")

    @property
    def right(self) -> float:
        """Right edge position."""
        return self.x + self.w

    @property
    def bottom(self) -> float:
        """Bottom edge position."""
        return self.y + self.h

    @property
    def center_x(self) -> float:
        """Horizontal center."""
        return self.x + self.w / 2

    @property
    def center_y(self) -> float:
        """Vertical center."""
        return self.y + self.h / 2

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def aspect_ratio(self) -> float:
        return self.w / self.h

    def moved_to(self, x: float, y: float) -> "Rect":
        """Same size, new top-left corner."""
        return Rect(x=x, y=y, w=self.w, h=self.h)

    def resized(self, w: float, h: float) -> "Rect":
        """Same top-left corner, new size."""
        return Rect(x=self.x, y=self.y, w=w, h=h)

    def expanded(self, padding: float) -> "Rect":
        """Grow the rectangle by ``padding`` on every side."""
        return Rect(
            x=self.x - padding,
            y=self.y - padding,
            w=self.w + 2 * padding,
            h=self.h + 2 * padding,
        )


def parse_rect(x: Any, y: Any, w: Any, h: Any) -> Rect:
    """Build a Rect from untrusted values.

    Args:
        x: Left edge.
        y: Top edge.
        w: Width, must be finite and positive.
        h: Height, must be finite and positive.

    Returns:
        Validated Rect.

    Raises:
        InvalidGeometry: If any value is missing, non-numeric, non-finite,
            or the size is zero or negative. Values are never clamped.
    """
    try:
        return Rect(x=x, y=y, w=w, h=h)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidGeometry(f"Invalid rectangle: {problems}") from e

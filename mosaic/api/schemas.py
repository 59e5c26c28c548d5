"""Request and response models for the mosaic API."""

from pydantic import BaseModel, Field


class RectRequest(BaseModel):
    """A rectangle submitted by a client. Validated by the engine, not here."""

    x: float | None = None
    y: float | None = None
    w: float | None = None
    h: float | None = None


class PlacementResponse(BaseModel):
    """A committed tile."""

    id: str
    url: str
    caption: str = ""
    x: float
    y: float
    w: float
    h: float
    created_at: str | None = None


class ConflictResponse(BaseModel):
    """Returned with 409 when a placement overlaps committed tiles."""

    error: str = "Overlaps an existing tile"
    conflicts: list[str] = Field(default_factory=list)


class ClearResponse(BaseModel):
    deleted: int


class ImageResponse(BaseModel):
    name: str
    url: str


class PositionSnapResponse(BaseModel):
    """Corrected position of a dragged tile."""

    x: float
    y: float
    snapped: bool
    rejected_overlap: bool = False


class SizeSnapResponse(BaseModel):
    """Corrected size of a resized tile."""

    w: float
    h: float
    snapped: bool
    edge: str | None = None


class AdmissionResponse(BaseModel):
    """Whether a ghost tile may be submitted."""

    can_submit: bool
    adjacent: bool
    overlaps: bool
    settled_count: int

"""Server-side snapping against the current wall.

Clients normally snap locally; these endpoints let a client re-snap against
the authoritative settled set, e.g. after a 409.
"""

from fastapi import APIRouter, HTTPException, status

from mosaic.api.dependencies import Guard, Snapper
from mosaic.api.schemas import (
    AdmissionResponse,
    PositionSnapResponse,
    RectRequest,
    SizeSnapResponse,
)
from mosaic.errors import InvalidGeometry
from mosaic.geometry import Rect, is_adjacent_to_any, overlaps_any
from mosaic.placements import validate_rect

router = APIRouter()


def _parse(request: RectRequest) -> Rect:
    try:
        return validate_rect(request.model_dump())
    except InvalidGeometry as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post("/position", response_model=PositionSnapResponse)
def snap_position(request: RectRequest, guard: Guard, snapper: Snapper):
    """Snap a dragged tile's position."""
    rect = _parse(request)
    result = snapper.snap_position(rect, guard.settled_rects())
    return PositionSnapResponse(
        x=result.x,
        y=result.y,
        snapped=result.snapped,
        rejected_overlap=result.rejected_overlap,
    )


@router.post("/size", response_model=SizeSnapResponse)
def snap_size(request: RectRequest, guard: Guard, snapper: Snapper):
    """Snap a resized tile's size, keeping its top-left corner and aspect ratio."""
    rect = _parse(request)
    result = snapper.snap_size(rect, guard.settled_rects())
    return SizeSnapResponse(w=result.w, h=result.h, snapped=result.snapped, edge=result.edge)


@router.post("/admission", response_model=AdmissionResponse)
def admission(request: RectRequest, guard: Guard, snapper: Snapper):
    """Check whether a ghost tile may be submitted where it is."""
    rect = _parse(request)
    settled = guard.settled_rects()
    return AdmissionResponse(
        can_submit=snapper.can_submit(rect, settled),
        adjacent=is_adjacent_to_any(rect, settled, snapper.tolerance),
        overlaps=overlaps_any(rect, settled, snapper.tolerance),
        settled_count=len(settled),
    )

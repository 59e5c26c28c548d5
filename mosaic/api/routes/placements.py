"""Placement routes - list, commit and delete tiles."""

import logging

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from mosaic.api.dependencies import AdminCredential, Guard, client_address
from mosaic.api.schemas import ClearResponse, ConflictResponse, PlacementResponse
from mosaic.auth import clear_failed_attempts, record_failed_attempt
from mosaic.db.models import Placement
from mosaic.errors import (
    InvalidGeometry,
    InvalidImage,
    NotAuthorized,
    OverlapConflict,
    PlacementNotFound,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(placement: Placement | dict) -> PlacementResponse:
    data = placement if isinstance(placement, dict) else placement.to_dict()
    return PlacementResponse(**data)


def _reject_credential(request: Request) -> HTTPException:
    attempt = record_failed_attempt(client_address(request))
    if not attempt["allowed"]:
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=attempt["message"],
        )
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid admin credential",
    )


@router.get("", response_model=list[PlacementResponse])
def list_placements(guard: Guard):
    """List every committed tile."""
    return [_to_response(p) for p in guard.list_placements()]


@router.get("/{placement_id}", response_model=PlacementResponse)
def get_placement(placement_id: str, guard: Guard):
    """Get a single tile."""
    try:
        return _to_response(guard.get(placement_id))
    except PlacementNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Placement not found",
        )


@router.post(
    "",
    response_model=PlacementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ConflictResponse}},
)
async def create_placement(
    guard: Guard,
    file: UploadFile | None = File(default=None),
    x: str | None = Form(default=None),
    y: str | None = Form(default=None),
    w: str | None = Form(default=None),
    h: str | None = Form(default=None),
    caption: str | None = Form(default=None),
):
    """Upload an image and commit its tile.

    The overlap check runs at commit time against the current wall, whatever
    the client snapped against. A 409 means: re-snap and try again.
    """
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file provided",
        )

    content = await file.read()

    try:
        placement = await run_in_threadpool(
            guard.publish,
            {"x": x, "y": y, "w": w, "h": h},
            file.filename or "image",
            content,
            file.content_type,
            caption,
        )
    except (InvalidGeometry, InvalidImage) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except OverlapConflict as e:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=ConflictResponse(conflicts=e.conflicting_ids).model_dump(),
        )

    return _to_response(placement)


@router.delete("/{placement_id}", response_model=PlacementResponse)
def delete_placement(
    placement_id: str,
    request: Request,
    guard: Guard,
    credential: AdminCredential,
):
    """Delete a tile and its image (admin only)."""
    try:
        deleted = guard.delete(placement_id, credential)
    except NotAuthorized:
        raise _reject_credential(request)
    except PlacementNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Placement not found",
        )

    clear_failed_attempts(client_address(request))
    return _to_response(deleted)


@router.delete("", response_model=ClearResponse)
def clear_placements(
    request: Request,
    guard: Guard,
    credential: AdminCredential,
):
    """Delete every tile and image (admin only)."""
    try:
        deleted = guard.clear(credential)
    except NotAuthorized:
        raise _reject_credential(request)

    clear_failed_attempts(client_address(request))
    logger.warning("Mosaic cleared by %s", client_address(request))
    return ClearResponse(deleted=deleted)

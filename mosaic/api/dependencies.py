"""FastAPI dependencies for the engine components and admin credentials."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from mosaic.api.config import get_settings
from mosaic.api.middleware import client_ip
from mosaic.auth import AdminAuthorizer, check_admin_attempts
from mosaic.db.base import SessionLocal
from mosaic.events import get_event_bus
from mosaic.placements import PlacementGuard, RegionLocks
from mosaic.snapping import SnappingEngine
from mosaic.storage import LocalImageStore


@lru_cache()
def get_image_store() -> LocalImageStore:
    """Image store configured from settings."""
    settings = get_settings()
    return LocalImageStore(
        settings.image_dir,
        public_base_url=f"{settings.api_prefix}/images",
        max_bytes=settings.max_image_bytes,
    )


@lru_cache()
def get_guard() -> PlacementGuard:
    """Process-wide placement guard.

    One instance per process so that every request shares the same region locks.
    """
    settings = get_settings()
    return PlacementGuard(
        session_factory=SessionLocal,
        image_store=get_image_store(),
        authorizer=AdminAuthorizer.from_settings(settings),
        tolerance=settings.overlap_tolerance,
        region_locks=RegionLocks(
            cell_size=settings.region_cell_size,
            stripes=settings.region_lock_stripes,
        ),
        events=get_event_bus(),
    )


def get_snapping_engine() -> SnappingEngine:
    settings = get_settings()
    return SnappingEngine(
        threshold=settings.snap_threshold,
        tolerance=settings.overlap_tolerance,
        min_size_offset=settings.min_size_offset,
        events=get_event_bus(),
    )


def client_address(request: Request) -> str:
    """Key for brute-force tracking: the same address the request log shows."""
    return client_ip(request)


async def get_admin_credential(
    request: Request,
    authorization: str | None = Header(default=None),
    x_admin_secret: str | None = Header(default=None),
) -> str:
    """Extract the admin secret from X-Admin-Secret or a Bearer header.

    Raises:
        HTTPException: If no credential was sent or the client is locked out.
    """
    lockout = check_admin_attempts(client_address(request))
    if not lockout["allowed"]:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=lockout["message"],
        )

    if x_admin_secret:
        return x_admin_secret
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Admin credential required",
        headers={"WWW-Authenticate": "Bearer"},
    )


# Type aliases for cleaner dependency injection
Guard = Annotated[PlacementGuard, Depends(get_guard)]
Snapper = Annotated[SnappingEngine, Depends(get_snapping_engine)]
Images = Annotated[LocalImageStore, Depends(get_image_store)]
AdminCredential = Annotated[str, Depends(get_admin_credential)]

"""Liveness and readiness probes."""

import logging
import os
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mosaic import __version__
from mosaic.api.dependencies import Images
from mosaic.db.base import get_db
from mosaic.db.models import Placement

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness of the placement store and image directory."""

    ready: bool
    checks: dict[str, bool]
    placements: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version=__version__,
    )


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(images: Images, db: Session = Depends(get_db)):
    """Ready when the placements table answers and images can be written."""
    placements = None
    try:
        placements = db.query(func.count(Placement.id)).scalar()
        database_ok = True
    except SQLAlchemyError:
        logger.exception("Placement store is not reachable")
        database_ok = False

    checks = {
        "database": database_ok,
        "images": os.access(images.root, os.W_OK),
    }
    return ReadinessResponse(ready=all(checks.values()), checks=checks, placements=placements)

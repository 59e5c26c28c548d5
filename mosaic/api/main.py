"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mosaic.api.config import get_settings
from mosaic.api.middleware import LoggingMiddleware
from mosaic.api.routes import api_router
from mosaic.errors import InvalidGeometry, InvalidImage, MosaicError, PlacementNotFound

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger("mosaic.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables and report the engine configuration on startup."""
    from mosaic.db.base import DATABASE_URL, init_db

    logger.info("%s v%s (%s)", settings.app_name, settings.app_version, settings.environment)
    logger.info(
        "Snap threshold %s, overlap tolerance %s, region cells %s x %d stripes",
        settings.snap_threshold,
        settings.overlap_tolerance,
        settings.region_cell_size,
        settings.region_lock_stripes,
    )
    if not settings.has_admin_secret:
        logger.warning("ADMIN_SECRET is not set; tiles cannot be deleted")
    if DATABASE_URL.startswith("sqlite"):
        logger.info("SQLite store: run a single worker process")

    init_db()
    yield
    logger.info("%s stopped", settings.app_name)


async def mosaic_error_handler(request: Request, exc: MosaicError) -> JSONResponse:
    """Last-resort mapping for engine errors a route did not translate."""
    if isinstance(exc, (InvalidGeometry, InvalidImage)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, PlacementNotFound):
        code = status.HTTP_404_NOT_FOUND
    else:
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc)
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Shared image mosaic with edge-snapping tiles",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        LoggingMiddleware,
        exclude_paths=["/health", f"{settings.api_prefix}/health", f"{settings.api_prefix}/ready"],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MosaicError, mosaic_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Liveness probe outside the API prefix."""
        return {"status": "healthy", "app": settings.app_name}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mosaic.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

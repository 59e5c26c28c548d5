"""Image routes."""

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from mosaic.api.dependencies import Images
from mosaic.api.schemas import ImageResponse

router = APIRouter()


@router.get("", response_model=list[ImageResponse])
def list_images(store: Images):
    """List stored images with their public URLs."""
    return [ImageResponse(name=i.name, url=i.url) for i in store.list_images()]


@router.get("/{name}")
def get_image(name: str, store: Images):
    """Serve a stored image."""
    try:
        path = store.path_for(name)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )
    return FileResponse(path)

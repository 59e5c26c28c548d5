"""Image storage for tile uploads."""

from mosaic.storage.images import LocalImageStore, StoredImage, sanitize_filename

__all__ = [
    "LocalImageStore",
    "StoredImage",
    "sanitize_filename",
]

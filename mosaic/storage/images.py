"""Local filesystem storage for tile images."""

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path

from mosaic.errors import InvalidImage

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredImage:
    """An image saved in the store."""

    name: str
    url: str


def sanitize_filename(filename: str) -> str:
    """Reduce an uploaded filename to a safe basename."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    base = _UNSAFE_CHARS.sub("_", base).strip("._")
    return base or "image"


class LocalImageStore:
    """Stores images in a directory and exposes them under a public URL prefix."""

    def __init__(
        self,
        root: str | Path,
        public_base_url: str = "/api/v1/images",
        max_bytes: int = 10 * 1024 * 1024,
    ):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    def url_for(self, name: str) -> str:
        return f"{self.public_base_url}/{name}"

    def save(self, filename: str, content: bytes, content_type: str | None) -> StoredImage:
        """Store an uploaded image.

        Args:
            filename: Client-supplied filename.
            content: Raw image bytes.
            content_type: Client-supplied MIME type.

        Returns:
            StoredImage with the generated name and its public URL.

        Raises:
            InvalidImage: If the payload is empty, too large, or not an image.
        """
        if not content:
            raise InvalidImage("Empty image upload")
        if len(content) > self.max_bytes:
            raise InvalidImage(f"Image exceeds {self.max_bytes} bytes")
        if not content_type or not content_type.startswith("image/"):
            raise InvalidImage(f"Unsupported content type: {content_type}")

        name = f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
        path = self.root / name
        # Same millisecond, same filename
        counter = 1
        while path.exists():
            name = f"{int(time.time() * 1000)}-{counter}-{sanitize_filename(filename)}"
            path = self.root / name
            counter += 1

        path.write_bytes(content)
        logger.debug("Stored image %s (%d bytes)", name, len(content))
        return StoredImage(name=name, url=self.url_for(name))

    def delete(self, ref: str) -> bool:
        """Remove an image by name or public URL.

        Returns:
            True if a file was removed.
        """
        name = ref.rstrip("/").rsplit("/", 1)[-1]
        try:
            path = self.path_for(name)
        except FileNotFoundError:
            return False
        path.unlink()
        logger.debug("Deleted image %s", name)
        return True

    def path_for(self, name: str) -> Path:
        """Resolve a stored image name to its file.

        Raises:
            FileNotFoundError: If the name is unsafe or no such image exists.
        """
        if not name or name != sanitize_filename(name):
            raise FileNotFoundError(name)
        path = self.root / name
        if not path.is_file():
            raise FileNotFoundError(name)
        return path

    def list_images(self) -> list[StoredImage]:
        """All stored images, oldest first."""
        return [
            StoredImage(name=p.name, url=self.url_for(p.name))
            for p in sorted(self.root.iterdir())
            if p.is_file()
        ]

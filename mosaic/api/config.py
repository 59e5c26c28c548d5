"""
Environment configuration for the mosaic service.

Every setting comes from an environment variable (optionally via a ``.env``
file at the project root) and is read once per process.
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


def _load_dotenv(path: Path = ENV_FILE) -> None:
    """Copy ``KEY=value`` lines into the environment without overriding it."""
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if key and value:
            os.environ.setdefault(key, value)


_load_dotenv()


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.app_name: str = os.environ.get("APP_NAME", "Mosaic")
        self.app_version: str = "0.1.0"
        self.environment: str = os.environ.get("ENVIRONMENT", "development")
        self.api_prefix: str = os.environ.get("API_PREFIX", "/api/v1")

        # Server
        self.host: str = os.environ.get("HOST", "0.0.0.0")
        self.port: int = _env_int("PORT", 8000)
        self.debug: bool = os.environ.get("DEBUG", "false").lower() == "true"
        self.log_level: str = os.environ.get("LOG_LEVEL", "info")
        self.allowed_origins: list[str] = [
            origin.strip()
            for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]

        # Uploaded images
        self.image_dir: str = os.environ.get("IMAGE_DIR", "./images")
        self.max_image_bytes: int = _env_int("MAX_IMAGE_BYTES", 10 * 1024 * 1024)

        # Deletion is admin-only: a bcrypt hash, or a plain secret hashed at startup
        self.admin_secret_hash: str = os.environ.get("ADMIN_SECRET_HASH", "")
        self.admin_secret: str = os.environ.get("ADMIN_SECRET", "")

        # Placement engine
        self.snap_threshold: float = _env_float("SNAP_THRESHOLD", 80)
        self.overlap_tolerance: float = _env_float("OVERLAP_TOLERANCE", 2)
        self.min_size_offset: float = _env_float("MIN_SIZE_OFFSET", 50)
        self.region_cell_size: float = _env_float("REGION_CELL_SIZE", 256)
        self.region_lock_stripes: int = _env_int("REGION_LOCK_STRIPES", 64)

    @property
    def has_admin_secret(self) -> bool:
        """Whether tiles can be deleted at all."""
        return bool(self.admin_secret_hash or self.admin_secret)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

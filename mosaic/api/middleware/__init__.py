"""API middleware for the mosaic service."""

from mosaic.api.middleware.logging import LoggingMiddleware, client_ip

__all__ = [
    "LoggingMiddleware",
    "client_ip",
]

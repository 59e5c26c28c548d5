"""Request logging middleware."""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("mosaic.api")

# Statuses that are expected outcomes of normal use of the wall.
EXPECTED_STATUSES = {
    409: "overlap",
    429: "locked out",
}


def level_for(method: str, status: int) -> int:
    """Log level for a finished request.

    Successful admin deletions are logged at WARNING so they stand out.
    """
    if status >= 500:
        return logging.ERROR
    if status in EXPECTED_STATUSES:
        return logging.INFO
    if status >= 400:
        return logging.WARNING
    if method == "DELETE":
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once it has a response, tagged with a request id.

    A client-supplied ``X-Request-ID`` is reused so a retry after a 409 can
    be matched with the attempt that conflicted.
    """

    def __init__(
        self,
        app,
        exclude_paths: list[str] | None = None,
    ):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/ready"]

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if any(path.startswith(p) for p in self.exclude_paths):
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s %s failed after %.1fms",
                request_id, request.method, path, (time.perf_counter() - started) * 1000,
            )
            raise

        status = response.status_code
        outcome = EXPECTED_STATUSES.get(status, "")
        logger.log(
            level_for(request.method, status),
            "[%s] %s %s -> %d%s in %.1fms (client %s)",
            request_id,
            request.method,
            path,
            status,
            f" {outcome}" if outcome else "",
            (time.perf_counter() - started) * 1000,
            client_ip(request),
        )

        response.headers["X-Request-ID"] = request_id
        return response


def client_ip(request: Request) -> str:
    """Client address, honoring proxy headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"

"""Request log middleware: one line per API request with status and timing."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log ``METHOD path status duration`` for requests under *prefix*."""

    def __init__(self, app, prefix: str = "/api"):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        if request.url.path.startswith(self.prefix):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %d in %.1fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
        return response

"""Request logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable, Optional


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        """Initialize logging middleware."""
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortlinks.web")

    async def dispatch(self, request: Request, call_next: Callable):
        """Log request and response."""
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(f"Unhandled error: {request.method} {request.url.path} from {client_ip}")
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.logger.info(
            f"{request.method} {request.url.path} from {client_ip} - "
            f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
        )

        return response

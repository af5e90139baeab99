"""Request logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from linfy.common.headers import get_client_ip


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per response with method, path, client, status and duration."""

    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("linfy.web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        client = get_client_ip(
            headers=dict(request.headers),
            peer_host=request.client.host if request.client else None,
            trust_forwarded_for=request.app.state.config.trust_forwarded_for,
        )

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        # 5xx are logged with traceback by the exception handlers
        level = logging.WARNING if 400 <= response.status_code < 500 else logging.INFO
        self.logger.log(
            level,
            f"{request.method} {request.url.path} from {client} "
            f"-> {response.status_code} ({duration_ms:.2f}ms)",
        )

        return response

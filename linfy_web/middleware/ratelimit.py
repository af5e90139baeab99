"""Rate limiting middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Callable

from linfy.common.headers import get_client_ip
from linfy.errors import RateLimitError


# Never counted against the budget; matched with and without the route prefix
EXEMPT_PATHS = {"/health", "/api/docs", "/api/redoc", "/openapi.json", "/docs/oauth2-redirect"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed the fixed-window request budget with 429."""

    async def dispatch(self, request: Request, call_next: Callable):
        limiter = getattr(request.app.state, "rate_limiter", None)
        config = request.app.state.config

        path = request.url.path
        prefix = config.route_prefix
        if prefix and path.startswith(prefix):
            path = path[len(prefix):] or "/"

        if limiter is None or request.method == "OPTIONS" or {path, request.url.path} & EXEMPT_PATHS:
            return await call_next(request)

        client = get_client_ip(
            headers=dict(request.headers),
            peer_host=request.client.host if request.client else None,
            trust_forwarded_for=config.trust_forwarded_for,
        )
        allowed, remaining, reset_in = await limiter.hit(client)

        headers = {
            "RateLimit-Limit": str(limiter.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(reset_in),
        }

        if not allowed:
            headers["Retry-After"] = str(reset_in)
            return JSONResponse(
                status_code=RateLimitError.status_code,
                content={"success": False, "error": RateLimitError.message},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

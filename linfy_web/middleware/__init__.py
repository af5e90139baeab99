"""Middleware for the Linfy web app."""

from .headers import SecurityHeadersMiddleware
from .logging import LoggingMiddleware
from .ratelimit import RateLimitMiddleware

__all__ = ["SecurityHeadersMiddleware", "LoggingMiddleware", "RateLimitMiddleware"]

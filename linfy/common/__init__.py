"""Common utilities for Linfy."""

from .validators import (
    is_valid_url,
    is_valid_email,
    is_valid_password,
    normalize_email,
)
from .headers import extract_forwarded_headers, get_client_ip, is_https
from .url_builder import build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_email",
    "is_valid_password",
    "normalize_email",
    "extract_forwarded_headers",
    "get_client_ip",
    "is_https",
    "build_short_url",
    "setup_logging",
    "get_logger",
]

"""Validation utilities for Linfy."""

import re
from urllib.parse import urlparse
from typing import Tuple


# Loose shape check; uniqueness is the store's job
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > 2048:
        return False, "URL is too long (max 2048 characters)"

    if any(c.isspace() for c in url):
        return False, "URL must not contain whitespace"

    if any(ord(c) < 0x20 or ord(c) == 0x7f for c in url):
        return False, "URL must not contain control characters"

    try:
        result = urlparse(url)

        # Check if scheme is http or https
        if result.scheme not in ["http", "https"]:
            return False, "URL must use http or https protocol"

        # Check if netloc (domain) exists
        if not result.hostname:
            return False, "URL must have a valid domain"

        # Accessing .port raises ValueError for out-of-range ports
        result.port

        return True, ""

    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address for storage and lookup."""
    return (email or "").strip().lower()


def is_valid_email(email: str) -> Tuple[bool, str]:
    """Validate an (already normalized) email address.

    Args:
        email: The email to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email:
        return False, "Email is required"

    if len(email) > 254:
        return False, "Email is too long (max 254 characters)"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    return True, ""


def is_valid_password(password: str) -> Tuple[bool, str]:
    """Validate a password accepted for hashing."""
    if not password:
        return False, "Password is required"

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False, f"Password is too long (max {MAX_PASSWORD_BYTES} bytes)"

    return True, ""

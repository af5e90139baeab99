"""
Error classes for consistent error handling.

Services raise these; the web layer converts them to JSON error bodies
carrying the class status code.
"""

from typing import Optional, Dict, Any


class APIError(Exception):
    """
    Base API error class.

    Attributes:
        status_code: HTTP status code (default: 500)
        message: Error message (default: "Internal server error")
        details: Optional additional error details
    """
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize API error.

        Args:
            message: Error message (overrides default)
            details: Optional additional error details
        """
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(APIError):
    """400 Validation error."""
    status_code = 400
    message = "Validation error"


class AuthenticationError(APIError):
    """401 Missing or invalid credential."""
    status_code = 401
    message = "Authentication required"


class AuthorizationError(APIError):
    """401 Credential accepted but the action was refused (e.g. wrong current password)."""
    status_code = 401
    message = "Not authorized"


class NotFoundError(APIError):
    """404 Not Found error."""
    status_code = 404
    message = "Not found"


class ConflictError(APIError):
    """409 Conflict error."""
    status_code = 409
    message = "Conflict"


class ApiKeyLimitError(ConflictError):
    """400 API key cap reached."""
    status_code = 400
    message = "Maximum 5 API keys allowed"


class RateLimitError(APIError):
    """429 Too many requests."""
    status_code = 429
    message = "Too many requests from this IP, please try again later."


class DatabaseError(APIError):
    """500 Database error."""
    status_code = 500
    message = "Database error"


class InternalError(APIError):
    """500 Internal error."""
    status_code = 500
    message = "Internal server error"

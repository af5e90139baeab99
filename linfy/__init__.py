"""Core business logic for Linfy."""

from .shortcode import ShortCodeGenerator
from .service import LinkService
from .accounts import AccountService
from .auth import Authenticator, PasswordHasher, SessionTokenIssuer

__all__ = [
    "ShortCodeGenerator",
    "LinkService",
    "AccountService",
    "Authenticator",
    "PasswordHasher",
    "SessionTokenIssuer",
]

"""Credential primitives and request authentication."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from .database.base import LinfyDBBase
from .errors import AuthenticationError
from .common.validators import MAX_PASSWORD_BYTES


class PasswordHasher:
    """bcrypt password hashing; calls run in a worker thread."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    def _hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def _verify(self, password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify, password, password_hash)

    async def verify_dummy(self, password: str) -> bool:
        """Spend one verify against a throwaway hash; always False."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash("linfy-dummy-password")
        await self.verify(password, self._dummy_hash)
        return False


class SessionTokenIssuer:
    """Sign and verify session tokens (JWT)."""

    def __init__(
        self,
        secret: str,
        expires_seconds: int = 7 * 24 * 60 * 60,
        algorithm: str = "HS256",
    ):
        self.secret = secret
        self.expires_seconds = expires_seconds
        self.algorithm = algorithm

    def issue(self, user_id: str, issued_at: Optional[datetime] = None) -> str:
        """Issue a token for a user.

        Args:
            user_id: Subject of the token
            issued_at: Issue time (defaults to now); expiry is relative to it

        Returns:
            Encoded token
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expires_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify a token and return its user id.

        Raises:
            AuthenticationError: For any bad signature, malformed token or expiry
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise AuthenticationError("Invalid token")
        return user_id


class Authenticator:
    """Resolve a request to a user id from a session token or an API key.

    A present Authorization header always selects the session path, so a
    malformed header is never bypassed by also sending an API key.
    """

    def __init__(
        self,
        db: LinfyDBBase,
        tokens: SessionTokenIssuer,
        logger: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.tokens = tokens
        self.logger = logger or logging.getLogger(__name__)

    def authenticate_session(self, authorization: Optional[str]) -> str:
        """Resolve ``Authorization: Bearer <token>``.

        Raises:
            AuthenticationError: Missing header, wrong scheme, or bad token
        """
        if authorization is None:
            raise AuthenticationError("Authentication required")

        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token or " " in token:
            raise AuthenticationError("Invalid token")

        return self.tokens.verify(token)

    async def authenticate_api_key(self, api_key: str) -> str:
        """Resolve an API key, stamping its last use.

        Raises:
            AuthenticationError: Unknown key
        """
        key = api_key.strip()
        user_id = await self.db.use_api_key(key, datetime.now(timezone.utc)) if key else None
        if not user_id:
            raise AuthenticationError("Invalid API key")
        return user_id

    async def authenticate(
        self,
        authorization: Optional[str],
        api_key: Optional[str],
        allow_api_key: bool = True,
    ) -> str:
        """Resolve a request's identity.

        Args:
            authorization: Authorization header value, if any
            api_key: X-API-Key header value, if any
            allow_api_key: False for session-only routes

        Returns:
            User id

        Raises:
            AuthenticationError: No acceptable credential
        """
        if authorization is not None:
            return self.authenticate_session(authorization)
        if allow_api_key and api_key is not None:
            return await self.authenticate_api_key(api_key)
        raise AuthenticationError("Authentication required")

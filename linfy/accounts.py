"""Account business logic: registration, login, profile and API keys."""

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from .auth import PasswordHasher, SessionTokenIssuer
from .database.base import LinfyDBBase, DuplicateKeyError
from .database.models import ApiKey, User
from .errors import (
    ApiKeyLimitError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from .common.validators import is_valid_email, is_valid_password, normalize_email


class AccountService:
    """Service layer for user accounts and their API keys."""

    def __init__(
        self,
        db: LinfyDBBase,
        hasher: PasswordHasher,
        tokens: SessionTokenIssuer,
        max_api_keys: int = 5,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize account service.

        Args:
            db: Database instance
            hasher: Password hasher
            tokens: Session token issuer
            max_api_keys: Maximum API keys a user may hold
            logger: Optional logger
        """
        self.db = db
        self.hasher = hasher
        self.tokens = tokens
        self.max_api_keys = max_api_keys
        self.logger = logger or logging.getLogger(__name__)

    async def _get_user(self, user_id: str) -> User:
        user = await self.db.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _clean_email(email: str) -> str:
        email = normalize_email(email)
        is_valid, error = is_valid_email(email)
        if not is_valid:
            raise ValidationError(error)
        return email

    @staticmethod
    def _check_password(password: str) -> None:
        is_valid, error = is_valid_password(password)
        if not is_valid:
            raise ValidationError(error)

    async def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """Register a new user.

        Raises:
            ValidationError: Missing or malformed field
            ConflictError: Email already registered
        """
        name = (name or "").strip()
        if not name or not (email or "").strip() or not password:
            raise ValidationError("Name, email, and password required")

        email = self._clean_email(email)
        self._check_password(password)

        if await self.db.get_user_by_email(email):
            raise ConflictError("Email already registered")

        user = User(
            id=uuid.uuid4().hex,
            email=email,
            password_hash=await self.hasher.hash(password),
            name=name,
            created_at=datetime.now(timezone.utc),
        )
        try:
            await self.db.create_user(user)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise ConflictError("Email already registered")

        self.logger.info(f"Registered user {user.id}")
        return {"message": "User registered"}

    async def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """Check credentials and issue a session token.

        Unknown email and wrong password raise the same error.

        Returns:
            Dictionary with token and public user
        """
        if not (email or "").strip() or not password:
            raise ValidationError("Email and password required")

        user = await self.db.get_user_by_email(normalize_email(email))
        if not user:
            # Same bcrypt cost as a wrong password, so timing does not reveal the email
            await self.hasher.verify_dummy(password)
            raise AuthenticationError("Invalid credentials")
        if not await self.hasher.verify(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        token = self.tokens.issue(user.id)
        self.logger.info(f"User {user.id} logged in")
        return {"token": token, "user": user.to_public_dict()}

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        user = await self._get_user(user_id)
        return user.to_public_dict()

    async def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Update name and/or email; at least one is required."""
        name = (name.strip() or None) if name else None
        email = email if email and email.strip() else None
        if not name and not email:
            raise ValidationError("Name or email required")

        if email:
            email = self._clean_email(email)

        try:
            user = await self.db.update_user(user_id, name=name, email=email)
        except DuplicateKeyError:
            raise ConflictError("Email already registered")
        if not user:
            raise NotFoundError("User not found")

        return {"message": "Profile updated", "user": user.to_public_dict()}

    async def change_password(
        self,
        user_id: str,
        old_password: Optional[str],
        new_password: Optional[str],
    ) -> Dict[str, Any]:
        """Replace the password after verifying the current one.

        Raises:
            AuthorizationError: The current password does not match
        """
        if not old_password or not new_password:
            raise ValidationError("Old and new password required")
        self._check_password(new_password)

        user = await self._get_user(user_id)
        if not await self.hasher.verify(old_password, user.password_hash):
            raise AuthorizationError("Old password is incorrect")

        await self.db.update_user(user_id, password_hash=await self.hasher.hash(new_password))
        self.logger.info(f"Password changed for user {user_id}")
        return {"message": "Password updated"}

    async def list_api_keys(self, user_id: str) -> List[ApiKey]:
        await self._get_user(user_id)
        return await self.db.list_api_keys(user_id)

    async def create_api_key(self, user_id: str) -> ApiKey:
        """Issue a new API key; the returned object is the only copy handed out.

        Raises:
            ApiKeyLimitError: The user already holds the maximum
        """
        await self._get_user(user_id)

        # A duplicate 256-bit key is practically impossible; retry once anyway
        for _ in range(2):
            api_key = ApiKey(
                key_id=uuid.uuid4().hex,
                key=secrets.token_hex(32),
                created_at=datetime.now(timezone.utc),
            )
            try:
                stored = await self.db.add_api_key(user_id, api_key, self.max_api_keys)
            except DuplicateKeyError:
                self.logger.warning("Generated API key collided, regenerating")
                continue

            if stored is None:
                raise ApiKeyLimitError(f"Maximum {self.max_api_keys} API keys allowed")
            self.logger.info(f"Created API key {stored.key_id} for user {user_id}")
            return stored

        raise InternalError("Unable to generate a unique API key")

    async def revoke_api_key(self, user_id: str, key_id: str) -> Dict[str, Any]:
        await self._get_user(user_id)
        if not await self.db.delete_api_key(user_id, key_id):
            raise NotFoundError("API key not found")
        self.logger.info(f"Revoked API key {key_id} for user {user_id}")
        return {"message": "API key revoked"}

"""Abstract base class for Linfy database implementations."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from datetime import datetime

from .models import ApiKey, Link, User


class DuplicateKeyError(Exception):
    """A unique index rejected a write.

    Attributes:
        field: Which uniqueness rule fired: "email", "url_code",
            "owner_url" or "api_key"
    """

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Duplicate value for unique field '{field}'")


class LinfyDBBase(ABC):
    """Abstract base class for user and link persistence.

    Implementations must enforce uniqueness of user email, link url_code,
    link short_url, (link owner, original_url) and API-key value atomically,
    raising DuplicateKeyError instead of overwriting.
    """

    def __init__(self, db_config: str):
        """Initialize database connection.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    # ---- users ----

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """Insert a new user.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user (with API keys) by id, or None."""
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user (with API keys) by normalized email, or None."""
        pass

    @abstractmethod
    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> Optional[User]:
        """Update the provided fields of a user.

        Returns:
            The updated user, or None if not found

        Raises:
            DuplicateKeyError: If the new email belongs to another user
        """
        pass

    # ---- API keys ----

    @abstractmethod
    async def add_api_key(self, user_id: str, api_key: ApiKey, max_keys: int) -> Optional[ApiKey]:
        """Attach an API key to a user unless the user already holds max_keys.

        The count check and the insert must be atomic per user.

        Returns:
            The stored key, or None if the cap was reached

        Raises:
            DuplicateKeyError: If the key value is already in use
        """
        pass

    @abstractmethod
    async def list_api_keys(self, user_id: str) -> List[ApiKey]:
        """List a user's API keys, oldest first."""
        pass

    @abstractmethod
    async def delete_api_key(self, user_id: str, key_id: str) -> bool:
        """Remove one of the user's API keys.

        Returns:
            True if deleted, False if the user holds no such key
        """
        pass

    @abstractmethod
    async def use_api_key(self, key: str, used_at: datetime) -> Optional[str]:
        """Resolve an API key to its owner and stamp its last_used.

        Returns:
            The owning user id, or None for an unknown key
        """
        pass

    # ---- links ----

    @abstractmethod
    async def create_link(self, link: Link) -> Link:
        """Insert a new link.

        Raises:
            DuplicateKeyError: On url_code/short_url ("url_code") or
                (owner, original_url) ("owner_url") collisions
        """
        pass

    @abstractmethod
    async def get_link_by_code(self, url_code: str) -> Optional[Link]:
        """Get a link by its short code, or None."""
        pass

    @abstractmethod
    async def get_link_by_owner_url(self, user_id: str, original_url: str) -> Optional[Link]:
        """Get the owner's link for exactly this original URL, or None."""
        pass

    @abstractmethod
    async def increment_clicks(self, url_code: str, accessed_at: datetime) -> Optional[Link]:
        """Atomically add one click and set last_accessed.

        Returns:
            The updated link, or None if the code is unknown (nothing is written)
        """
        pass

    @abstractmethod
    async def list_links_by_owner(self, user_id: str) -> List[Link]:
        """List a user's links, newest first."""
        pass

    # ---- service-wide ----

    @abstractmethod
    async def get_statistics(self) -> Dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with total_users, total_links, total_clicks
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close database connections."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if database is healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass

"""In-process implementation of the Linfy store.

Used for development (``DATABASE_URL=memory://``) and tests. Every mutation
runs under one asyncio lock, which gives the same atomicity the PostgreSQL
unique indexes and row locks give.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, List, Dict, Any

from .base import LinfyDBBase, DuplicateKeyError
from .models import ApiKey, Link, User


class LinfyMemoryDB(LinfyDBBase):
    """Dictionary-backed store; nothing survives a restart."""

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._lock = asyncio.Lock()
        self._users: Dict[str, User] = {}
        self._links: Dict[str, Link] = {}
        # Secondary unique indexes
        self._user_by_email: Dict[str, str] = {}
        self._link_by_code: Dict[str, str] = {}
        self._link_by_short_url: Dict[str, str] = {}
        self._link_by_owner_url: Dict[tuple, str] = {}
        self._owner_by_key: Dict[str, str] = {}

    def _copy_user(self, user: User) -> User:
        return replace(user, api_keys=[replace(k) for k in user.api_keys])

    # ---- users ----

    async def create_user(self, user: User) -> User:
        async with self._lock:
            if user.email in self._user_by_email:
                raise DuplicateKeyError("email")
            stored = self._copy_user(user)
            self._users[stored.id] = stored
            self._user_by_email[stored.email] = stored.id
            return self._copy_user(stored)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return self._copy_user(user) if user else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        user_id = self._user_by_email.get(email)
        return await self.get_user_by_id(user_id) if user_id else None

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> Optional[User]:
        async with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None

            if email is not None and email != user.email:
                if email in self._user_by_email:
                    raise DuplicateKeyError("email")
                del self._user_by_email[user.email]
                self._user_by_email[email] = user_id
                user.email = email
            if name is not None:
                user.name = name
            if password_hash is not None:
                user.password_hash = password_hash

            return self._copy_user(user)

    # ---- API keys ----

    async def add_api_key(self, user_id: str, api_key: ApiKey, max_keys: int) -> Optional[ApiKey]:
        async with self._lock:
            user = self._users.get(user_id)
            if not user or len(user.api_keys) >= max_keys:
                return None
            if api_key.key in self._owner_by_key:
                raise DuplicateKeyError("api_key")
            stored = replace(api_key)
            user.api_keys.append(stored)
            self._owner_by_key[stored.key] = user_id
            return replace(stored)

    async def list_api_keys(self, user_id: str) -> List[ApiKey]:
        user = self._users.get(user_id)
        return [replace(k) for k in user.api_keys] if user else []

    async def delete_api_key(self, user_id: str, key_id: str) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if not user:
                return False
            for i, api_key in enumerate(user.api_keys):
                if api_key.key_id == key_id:
                    del user.api_keys[i]
                    del self._owner_by_key[api_key.key]
                    return True
            return False

    async def use_api_key(self, key: str, used_at: datetime) -> Optional[str]:
        async with self._lock:
            user_id = self._owner_by_key.get(key)
            if not user_id:
                return None
            for api_key in self._users[user_id].api_keys:
                if api_key.key == key:
                    api_key.last_used = used_at
            return user_id

    # ---- links ----

    async def create_link(self, link: Link) -> Link:
        async with self._lock:
            if link.url_code in self._link_by_code or link.short_url in self._link_by_short_url:
                raise DuplicateKeyError("url_code")
            owner_key = (link.user_id, link.original_url)
            if link.user_id is not None and owner_key in self._link_by_owner_url:
                raise DuplicateKeyError("owner_url")

            stored = replace(link)
            self._links[stored.id] = stored
            self._link_by_code[stored.url_code] = stored.id
            self._link_by_short_url[stored.short_url] = stored.id
            if stored.user_id is not None:
                self._link_by_owner_url[owner_key] = stored.id
            return replace(stored)

    async def get_link_by_code(self, url_code: str) -> Optional[Link]:
        link_id = self._link_by_code.get(url_code)
        return replace(self._links[link_id]) if link_id else None

    async def get_link_by_owner_url(self, user_id: str, original_url: str) -> Optional[Link]:
        link_id = self._link_by_owner_url.get((user_id, original_url))
        return replace(self._links[link_id]) if link_id else None

    async def increment_clicks(self, url_code: str, accessed_at: datetime) -> Optional[Link]:
        async with self._lock:
            link_id = self._link_by_code.get(url_code)
            if not link_id:
                return None
            link = self._links[link_id]
            link.clicks += 1
            link.last_accessed = accessed_at
            return replace(link)

    async def list_links_by_owner(self, user_id: str) -> List[Link]:
        # Newest insert first among equal timestamps (sort is stable)
        links = [replace(l) for l in reversed(list(self._links.values())) if l.user_id == user_id]
        links.sort(key=lambda l: l.created_at, reverse=True)
        return links

    # ---- service-wide ----

    async def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_users": len(self._users),
            "total_links": len(self._links),
            "total_clicks": sum(l.clicks for l in self._links.values()),
        }

    async def close(self) -> None:
        self.logger.debug("Memory store closed")

    async def health_check(self) -> bool:
        return True

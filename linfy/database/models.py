"""Data models for Linfy."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ApiKey:
    """An API key held by a user."""

    key_id: str
    key: str
    created_at: datetime
    last_used: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        """Listing projection; never includes the secret."""
        return {
            "keyId": self.key_id,
            "createdAt": _iso(self.created_at),
            "lastUsed": _iso(self.last_used),
        }


@dataclass
class User:
    """Represents a registered user."""

    id: str
    email: str
    password_hash: str
    name: str
    created_at: datetime
    api_keys: List[ApiKey] = field(default_factory=list)

    def to_public_dict(self) -> dict:
        """Public projection; never includes the password hash or keys."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
        }


@dataclass
class Link:
    """Represents a short link in the database."""

    id: str
    original_url: str
    url_code: str
    short_url: str
    qr_code: str
    created_at: datetime
    last_accessed: datetime
    clicks: int = 0
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    user_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "original_url": self.original_url,
            "url_code": self.url_code,
            "short_url": self.short_url,
            "qr_code": self.qr_code,
            "clicks": self.clicks,
            "created_at": _iso(self.created_at),
            "last_accessed": _iso(self.last_accessed),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "user_id": self.user_id,
        }

    def to_history_dict(self) -> dict:
        """History projection; no provenance fields."""
        return {
            "original_url": self.original_url,
            "short_url": self.short_url,
            "created_at": _iso(self.created_at),
            "clicks": self.clicks,
            "qr_code": self.qr_code,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Link":
        """Create from dictionary (a store row or a to_dict() result)."""
        def _dt(value):
            if value is None or isinstance(value, datetime):
                return value
            return datetime.fromisoformat(value)

        return cls(
            id=data["id"],
            original_url=data["original_url"],
            url_code=data["url_code"],
            short_url=data["short_url"],
            qr_code=data["qr_code"],
            created_at=_dt(data["created_at"]),
            last_accessed=_dt(data["last_accessed"]),
            clicks=data.get("clicks", 0),
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
            user_id=data.get("user_id"),
        )

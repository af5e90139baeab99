"""Pydantic schemas for API requests and responses.

JSON keys are camelCase on the wire; fields are snake_case in Python.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


# ---- links ----

class ShortenRequest(CamelModel):
    """Request to shorten a URL.

    Presence and format are checked by the service so the error wording
    matches the rest of the API.
    """

    original_url: Optional[str] = Field(None, description="The URL to shorten", max_length=4096)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"originalUrl": "https://example.com/very/long/path/to/resource"},
            ]
        }
    }


class LinkResponse(CamelModel):
    """Full link record."""

    id: str
    original_url: str
    url_code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    qr_code: str = Field(..., description="PNG QR code of the short URL as a data URI")
    clicks: int
    created_at: datetime
    last_accessed: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    user_id: Optional[str] = None


class LinkEnvelope(CamelModel):
    """Single link wrapped in the success envelope."""

    success: bool = True
    data: LinkResponse
    message: Optional[str] = None


class HistoryItem(CamelModel):
    """Link as shown in a user's history."""

    original_url: str
    short_url: str
    created_at: datetime
    clicks: int
    qr_code: str


class HistoryEnvelope(CamelModel):
    """History wrapped in the success envelope."""

    success: bool = True
    data: List[HistoryItem]


class MetricsResponse(CamelModel):
    """Service-wide totals."""

    total_users: int
    total_urls: int
    total_clicks: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")
    uptime: float = Field(..., description="Seconds since startup")


class ErrorResponse(BaseModel):
    """Error response."""

    success: bool = False
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")


# ---- accounts ----

class RegisterRequest(CamelModel):
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=320)
    password: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"name": "Ada", "email": "ada@example.com", "password": "secret1"},
            ]
        }
    }


class LoginRequest(CamelModel):
    email: Optional[str] = Field(None, max_length=320)
    password: Optional[str] = None


class UserResponse(CamelModel):
    """Public user projection."""

    id: str
    name: str
    email: str


class LoginResponse(CamelModel):
    token: str = Field(..., description="Session token, valid for 7 days")
    user: UserResponse


class UpdateProfileRequest(CamelModel):
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=320)


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserResponse


class ChangePasswordRequest(CamelModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class MessageResponse(CamelModel):
    message: str


class ApiKeyCreatedResponse(CamelModel):
    """The only response that ever carries the raw key."""

    api_key: str = Field(..., description="The API key; store it now, it is not shown again")
    key_id: str
    created_at: datetime


class ApiKeyInfo(CamelModel):
    key_id: str
    created_at: datetime
    last_used: Optional[datetime] = None


class ApiKeyListResponse(CamelModel):
    api_keys: List[ApiKeyInfo]

"""Pydantic models for API request/response validation."""

import re
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.enums import ButtonStyle, SocialPlatform, Theme

RESERVED_USERNAMES = frozenset(
    {
        "admin", "api", "www", "app", "dashboard", "auth", "login", "signup",
        "signin", "signout", "settings", "analytics", "billing", "links",
        "about", "contact", "help", "support", "terms", "privacy", "security",
    }
)

USERNAME_PATTERN = re.compile(r"^[a-z0-9_]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def sanitize_string(value: str) -> str:
    """Trim whitespace and escape angle brackets."""
    return value.strip().replace("<", "&lt;").replace(">", "&gt;")


def validate_url(value: str) -> str:
    """Accept absolute http(s) URLs only, returning the sanitized value."""
    parsed = urlparse(value.strip())
    if not parsed.scheme:
        raise ValueError("Invalid URL format")
    if parsed.scheme.lower() not in ("http", "https"):
        raise ValueError("URL must use http or https protocol")
    if not parsed.netloc:
        raise ValueError("Invalid URL format")
    return sanitize_string(value)


def validate_username(value: str) -> str:
    if len(value) < 3:
        raise ValueError("Username must be at least 3 characters")
    if len(value) > 30:
        raise ValueError("Username must be at most 30 characters")
    if not USERNAME_PATTERN.match(value):
        raise ValueError(
            "Username can only contain lowercase letters, numbers, and underscores"
        )
    username = value.lower().strip()
    if username in RESERVED_USERNAMES:
        raise ValueError("This username is reserved")
    return username


def validate_password(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if len(value) > 128:
        raise ValueError("Password must be at most 128 characters")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return value


def _sanitized(value: str, max_length: int, message: str, min_length: int = 0) -> str:
    if len(value) < min_length or len(value) > max_length:
        raise ValueError(message)
    return sanitize_string(value)


def validate_link_title(value: str) -> str:
    return _sanitized(
        value, 100, "Title is required and must be at most 100 characters", min_length=1
    )


def validate_name(value: str) -> str:
    return _sanitized(value, 100, "Name must be at most 100 characters")


def validate_bio(value: str) -> str:
    return _sanitized(value, 160, "Bio must be at most 160 characters")


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class ProblemDetails(BaseModel):
    """RFC 9457 Problem Details for HTTP APIs."""

    type: str = Field(description="A URI reference that identifies the problem type")
    title: str = Field(
        description="A short, human-readable summary of the problem type"
    )
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(
        None, description="A human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None, description="A URI reference that identifies the specific occurrence"
    )


class SuccessResponse(BaseModel):
    success: bool = True


# Authentication schemas
class SignupRequest(CamelModel):
    """Schema for account creation."""

    email: EmailStr
    password: str
    username: str
    name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower().strip()

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return validate_password(value)

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        return validate_username(value)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: Optional[str]) -> Optional[str]:
        return validate_name(value) if value is not None else None


class SigninRequest(CamelModel):
    """Schema for sign-in."""

    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower().strip()

    @field_validator("password")
    @classmethod
    def _require_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class SessionUser(CamelModel):
    id: UUID
    email: str
    username: str
    name: Optional[str] = None
    plan: str


class SessionUserResponse(CamelModel):
    user: SessionUser


# Link schemas
class LinkCreate(CamelModel):
    """Schema for creating a link."""

    title: str
    url: str

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        return validate_link_title(value)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return validate_url(value)


class LinkUpdate(CamelModel):
    """Schema for a partial link update."""

    title: Optional[str] = None
    url: Optional[str] = None
    is_active: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: Optional[str]) -> Optional[str]:
        return validate_link_title(value) if value is not None else None

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_url(value) if value is not None else None


class LinkOrder(CamelModel):
    id: UUID
    order: int = Field(ge=0)


class ReorderRequest(CamelModel):
    """Schema for reordering links."""

    links: List[LinkOrder]

    @field_validator("links")
    @classmethod
    def _require_links(cls, value: List[LinkOrder]) -> List[LinkOrder]:
        if not value:
            raise ValueError("At least one link is required")
        return value


class LinkResponse(CamelModel):
    id: UUID
    title: str
    url: str
    is_active: bool
    order: int
    click_count: int = 0
    created_at: datetime
    updated_at: datetime


class LinkEnvelope(CamelModel):
    link: LinkResponse


class LinkListResponse(CamelModel):
    links: List[LinkResponse]


# User / appearance schemas
class SocialLinkInput(CamelModel):
    platform: SocialPlatform
    url: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return validate_url(value)


class SocialLinkResponse(CamelModel):
    id: UUID
    platform: str
    url: str
    order: int


class UserUpdate(CamelModel):
    """Schema for updating profile and appearance settings."""

    name: Optional[str] = None
    bio: Optional[str] = None
    theme: Optional[Theme] = None
    button_style: Optional[ButtonStyle] = None
    social_links: Optional[List[SocialLinkInput]] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: Optional[str]) -> Optional[str]:
        return validate_name(value) if value is not None else None

    @field_validator("bio")
    @classmethod
    def _check_bio(cls, value: Optional[str]) -> Optional[str]:
        return validate_bio(value) if value is not None else None


class UserProfile(CamelModel):
    id: UUID
    email: str
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    plan: str
    theme: str
    button_style: str
    social_links: List[SocialLinkResponse] = Field(default_factory=list)


class UserProfileResponse(CamelModel):
    user: UserProfile


# Public profile schemas
class PublicUser(CamelModel):
    id: UUID
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    plan: str


class PublicLink(CamelModel):
    id: UUID
    title: str
    url: str
    order: int


class ThemeInfo(CamelModel):
    id: str
    name: str
    background: str
    card: str
    text: str
    button: str


class ButtonStyleInfo(CamelModel):
    id: str
    name: str
    class_name: str


class PublicSocialLink(SocialLinkResponse):
    name: str
    icon: str


class PublicProfileResponse(CamelModel):
    user: PublicUser
    links: List[PublicLink]
    social_links: List[PublicSocialLink]
    theme: ThemeInfo
    button_style: ButtonStyleInfo


# Analytics schemas
class ClickTrackRequest(CamelModel):
    """Schema for a tracked outbound click."""

    link_id: str
    user_id: str

    @field_validator("link_id")
    @classmethod
    def _require_link_id(cls, value: str) -> str:
        if not value:
            raise ValueError("Link ID is required")
        return value

    @field_validator("user_id")
    @classmethod
    def _require_user_id(cls, value: str) -> str:
        if not value:
            raise ValueError("User ID is required")
        return value


class ChartPoint(CamelModel):
    date: str
    views: int
    clicks: int


class AnalyticsStats(CamelModel):
    views: int
    clicks: int
    views_trend: int
    clicks_trend: int
    ctr: str


class TopLinkEntry(CamelModel):
    name: str
    url: str
    clicks: int


class AnalyticsResponse(CamelModel):
    chart_data: List[ChartPoint]
    stats: AnalyticsStats
    top_links: List[TopLinkEntry]

"""
Forum, category and domain schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from formai.core.text import SLUG_PATTERN, HEX_COLOR_PATTERN, is_http_url, normalize_domain


def _check_slug(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if not SLUG_PATTERN.match(value):
        raise ValueError("must contain only lowercase letters, numbers and hyphens")
    return value


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not HEX_COLOR_PATTERN.match(value):
        raise ValueError("must be a hex color like #3B82F6")
    return value


def _check_url(value: Optional[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    if not is_http_url(value):
        raise ValueError("must be a valid http(s) URL")
    return value


class ForumCreate(BaseModel):
    """Create a forum. The slug is derived from the name when omitted."""
    name: str = Field(min_length=3, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = None
    theme_color: str = "#3B82F6"
    primary_font: str = "Inter"
    secondary_font: str = "Inter"
    heading_font_size: int = Field(default=24, ge=10, le=72)
    body_font_size: int = Field(default=16, ge=10, le=32)
    main_website_url: Optional[str] = None
    is_public: bool = True
    requires_approval: bool = False

    validate_slug = field_validator("slug")(_check_slug)
    validate_color = field_validator("theme_color")(_check_color)
    validate_url = field_validator("main_website_url")(_check_url)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Acme Help Community",
                "description": "Questions and answers about Acme products",
                "theme_color": "#3B82F6",
                "main_website_url": "https://acme.com"
            }
        }


class ForumUpdate(BaseModel):
    """Update forum settings."""
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = None
    theme_color: Optional[str] = None
    primary_font: Optional[str] = None
    secondary_font: Optional[str] = None
    heading_font_size: Optional[int] = Field(default=None, ge=10, le=72)
    body_font_size: Optional[int] = Field(default=None, ge=10, le=32)
    main_website_url: Optional[str] = None
    is_public: Optional[bool] = None
    requires_approval: Optional[bool] = None

    validate_slug = field_validator("slug")(_check_slug)
    validate_color = field_validator("theme_color")(_check_color)
    validate_url = field_validator("main_website_url")(_check_url)


class ForumDomainUpdate(BaseModel):
    """Change the subdomain and/or custom domain of a forum."""
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None

    @field_validator("subdomain")
    @classmethod
    def check_subdomain(cls, value: Optional[str]) -> Optional[str]:
        return _check_slug(value)

    @field_validator("custom_domain")
    @classmethod
    def check_domain(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        domain = normalize_domain(value)
        if "." not in domain:
            raise ValueError("must be a fully qualified domain name")
        return domain


class ForumResponse(BaseModel):
    """Forum as seen by its owner."""
    id: uuid.UUID
    org_id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    slug: str
    description: Optional[str]
    theme_color: str
    primary_font: str
    secondary_font: str
    heading_font_size: int
    body_font_size: int
    main_website_url: Optional[str]
    subdomain: Optional[str]
    custom_domain: Optional[str]
    is_public: bool
    requires_approval: bool
    api_key: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ForumPublicResponse(BaseModel):
    """Forum fields safe to expose to visitors."""
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str]
    theme_color: str
    primary_font: str
    secondary_font: str
    heading_font_size: int
    body_font_size: int
    main_website_url: Optional[str]
    subdomain: Optional[str]
    custom_domain: Optional[str]
    requires_approval: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ForumSummary(ForumResponse):
    """Forum with content totals, used in the owner's forum list."""
    question_count: int = 0
    answer_count: int = 0


class CategoryCreate(BaseModel):
    """Create a category."""
    name: str = Field(min_length=2, max_length=80)
    slug: Optional[str] = None
    description: Optional[str] = None

    validate_slug = field_validator("slug")(_check_slug)


class CategoryResponse(BaseModel):
    """Category response."""
    id: uuid.UUID
    forum_id: uuid.UUID
    name: str
    slug: str
    description: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class DomainVerificationRequest(BaseModel):
    """Start verification of a custom domain."""
    domain: str

    @field_validator("domain")
    @classmethod
    def check_domain(cls, value: str) -> str:
        domain = normalize_domain(value)
        if "." not in domain:
            raise ValueError("must be a fully qualified domain name")
        return domain


class DomainVerificationCheck(DomainVerificationRequest):
    """Confirm a custom domain with the issued token."""
    token: str


class DomainVerificationResponse(BaseModel):
    """Verification token and DNS instructions."""
    domain: str
    verification_token: str
    is_verified: bool
    verified_at: Optional[datetime] = None
    record_type: str = "TXT"
    record_name: str
    record_value: str

"""
Gated content schemas.
"""
import uuid
from typing import Optional, Literal, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from formai.core.text import SLUG_PATTERN

GatedContentType = Literal["download", "redirect", "embed"]


def _check_slug(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if not SLUG_PATTERN.match(value):
        raise ValueError("must contain only lowercase letters, numbers and hyphens")
    return value


class GatedContentCreate(BaseModel):
    forum_id: uuid.UUID
    form_id: Optional[uuid.UUID] = None
    title: str = Field(min_length=3)
    slug: str = Field(min_length=1)
    description: str = Field(min_length=10)
    teaser: str = Field(min_length=1)
    content: str = Field(min_length=1)
    content_type: GatedContentType = "download"
    featured_image: Optional[str] = None
    download_url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    require_email: bool = True
    require_name: bool = False
    collect_phone_number: bool = False
    is_active: bool = True

    validate_slug = field_validator("slug")(_check_slug)


class GatedContentUpdate(BaseModel):
    form_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(default=None, min_length=3)
    slug: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=10)
    teaser: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    content_type: Optional[GatedContentType] = None
    featured_image: Optional[str] = None
    download_url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    require_email: Optional[bool] = None
    require_name: Optional[bool] = None
    collect_phone_number: Optional[bool] = None
    is_active: Optional[bool] = None

    validate_slug = field_validator("slug")(_check_slug)


class GatedContentTeaser(BaseModel):
    """Public view, without the gated body."""
    id: uuid.UUID
    forum_id: uuid.UUID
    form_id: Optional[uuid.UUID]
    title: str
    slug: str
    description: str
    teaser: str
    content_type: str
    featured_image: Optional[str]
    meta_description: Optional[str]
    meta_keywords: Optional[str]
    require_email: bool
    require_name: bool
    collect_phone_number: bool
    created_at: datetime

    class Config:
        from_attributes = True


class GatedContentResponse(GatedContentTeaser):
    content: str
    download_url: Optional[str]
    is_active: bool
    updated_at: datetime


class UnlockRequest(BaseModel):
    form_data: Dict[str, Any]


class UnlockResponse(BaseModel):
    success: bool = True
    submission_id: Optional[uuid.UUID] = None
    content: GatedContentResponse

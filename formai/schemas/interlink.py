"""
Main-site page and interlink schemas.
"""
import uuid
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from formai.core.text import SLUG_PATTERN

ContentType = Literal["question", "answer", "main_page"]


class MainSitePageCreate(BaseModel):
    """Register a page of the main website."""
    title: str = Field(min_length=3)
    slug: str
    content: str = ""
    url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    page_type: str = "page"
    featured_image: Optional[str] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        value = value.strip().lower()
        if not SLUG_PATTERN.match(value):
            raise ValueError("must contain only lowercase letters, numbers and hyphens")
        return value


class MainSitePageUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3)
    content: Optional[str] = None
    url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    page_type: Optional[str] = None
    featured_image: Optional[str] = None


class MainSitePageResponse(BaseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    title: str
    slug: str
    content: str
    url: Optional[str]
    meta_description: Optional[str]
    meta_keywords: Optional[str]
    page_type: str
    featured_image: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InterlinkCreate(BaseModel):
    """Link one piece of content to another."""
    source_type: ContentType
    source_id: uuid.UUID
    target_type: ContentType
    target_id: uuid.UUID
    anchor_text: str = Field(min_length=1, max_length=200)
    relevance_score: int = Field(default=0, ge=0, le=100)
    automatic: bool = False
    forum_id: Optional[uuid.UUID] = None


class InterlinkResponse(BaseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    forum_id: Optional[uuid.UUID]
    source_type: str
    source_id: uuid.UUID
    target_type: str
    target_id: uuid.UUID
    anchor_text: str
    relevance_score: int
    automatic: bool
    created_by: Optional[uuid.UUID]
    created_at: datetime

    class Config:
        from_attributes = True


class RelevantContent(BaseModel):
    """A candidate link target found by keyword overlap."""
    content_type: str
    content_id: uuid.UUID
    title: str
    relevance_score: int

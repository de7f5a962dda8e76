"""
Gated content model.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class GatedContent(SQLModel, table=True):
    """
    Premium content whose teaser is public and whose body is unlocked
    by submitting a lead form.
    """
    __tablename__ = "gated_content"
    __table_args__ = (UniqueConstraint("forum_id", "slug", name="uq_gated_content_forum_slug"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)
    form_id: Optional[uuid.UUID] = Field(default=None, foreign_key="lead_form.id", index=True)

    title: str
    slug: str = Field(index=True)
    description: str
    teaser: str
    content: str
    content_type: str = Field(default="download")  # download, redirect, embed

    featured_image: Optional[str] = None
    download_url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None

    require_email: bool = Field(default=True)
    require_name: bool = Field(default=False)
    collect_phone_number: bool = Field(default=False)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

"""
Interlinking models - main-site pages and links between content.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

CONTENT_TYPES = ("question", "answer", "main_page")


class MainSitePage(SQLModel, table=True):
    """A page of the customer's own website, used as an interlink target."""
    __tablename__ = "main_site_page"
    __table_args__ = (UniqueConstraint("org_id", "slug", name="uq_main_page_org_slug"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)

    title: str
    slug: str = Field(index=True)
    content: str = ""
    url: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    page_type: str = Field(default="page")  # page, landing, blog, product
    featured_image: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ContentInterlink(SQLModel, table=True):
    """
    Directed link from one piece of content to another.
    Source and target are (type, id) pairs over questions, answers and main pages.
    """
    __tablename__ = "content_interlink"
    __table_args__ = (
        UniqueConstraint(
            "source_type", "source_id", "target_type", "target_id",
            name="uq_interlink_source_target",
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    forum_id: Optional[uuid.UUID] = Field(default=None, foreign_key="forum.id", index=True)

    source_type: str = Field(index=True)
    source_id: uuid.UUID = Field(index=True)
    target_type: str = Field(index=True)
    target_id: uuid.UUID = Field(index=True)

    anchor_text: str
    relevance_score: int = Field(default=0)  # 0-100
    automatic: bool = Field(default=False)
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)

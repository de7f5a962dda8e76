"""
Forum models - the hosted Q&A communities.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class Forum(SQLModel, table=True):
    """
    A forum owned by an organization.
    Reachable by slug, subdomain of the base domain or a verified custom domain.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    name: str = Field(index=True)
    slug: str = Field(unique=True, index=True)
    description: Optional[str] = None

    # Branding
    theme_color: str = Field(default="#3B82F6")
    primary_font: str = Field(default="Inter")
    secondary_font: str = Field(default="Inter")
    heading_font_size: int = Field(default=24)
    body_font_size: int = Field(default=16)

    # Domains
    main_website_url: Optional[str] = None
    subdomain: Optional[str] = Field(default=None, unique=True, index=True)
    custom_domain: Optional[str] = Field(default=None, unique=True, index=True)

    # Access
    is_public: bool = Field(default=True)
    requires_approval: bool = Field(default=False)

    # Embed API key, sent by widgets as X-API-Key
    api_key: str = Field(index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class DomainVerification(SQLModel, table=True):
    """Pending or completed proof of ownership for a custom domain."""
    __tablename__ = "domain_verification"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)
    domain: str = Field(unique=True, index=True)
    verification_token: str
    is_verified: bool = Field(default=False)
    verified_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)


class Category(SQLModel, table=True):
    """Question category within a forum."""
    __table_args__ = (UniqueConstraint("forum_id", "slug", name="uq_category_forum_slug"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)
    name: str
    slug: str = Field(index=True)
    description: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

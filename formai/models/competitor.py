"""
Competitor model.
"""
import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class Competitor(SQLModel, table=True):
    """A competing site tracked by an organization, optionally per forum."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    forum_id: Optional[uuid.UUID] = Field(default=None, foreign_key="forum.id", index=True)

    name: str = Field(index=True)
    domain: str = Field(index=True)
    industry: Optional[str] = None
    description: Optional[str] = None

    strengths: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    weaknesses: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    keywords: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Latest AI analysis, kept verbatim
    analysis: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    domain_authority: Optional[int] = None
    backlinks: Optional[int] = None

    is_tracked: bool = Field(default=True)
    last_analyzed_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

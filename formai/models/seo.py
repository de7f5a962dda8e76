"""
Keyword tracking models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class TrackedKeyword(SQLModel, table=True):
    """A search keyword tracked for a forum."""
    __tablename__ = "tracked_keyword"
    __table_args__ = (UniqueConstraint("forum_id", "keyword", name="uq_tracked_keyword_forum"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)

    keyword: str = Field(index=True)
    url: Optional[str] = None
    search_volume: Optional[int] = None
    difficulty: Optional[int] = None  # 0-100
    priority: str = Field(default="medium")  # low, medium, high
    intent: Optional[str] = None  # informational, commercial, navigational, transactional
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class KeywordRanking(SQLModel, table=True):
    """A recorded search position for a tracked keyword."""
    __tablename__ = "keyword_ranking"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    keyword_id: uuid.UUID = Field(foreign_key="tracked_keyword.id", index=True)

    date: datetime = Field(default_factory=datetime.utcnow, index=True)
    position: int
    previous_position: Optional[int] = None
    change: int = Field(default=0)  # positive = moved up
    clicks: int = Field(default=0)
    impressions: int = Field(default=0)
    ctr: float = Field(default=0.0)

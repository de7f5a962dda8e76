"""
Keyword tracking and competitor schemas.
"""
import uuid
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from formai.core.text import normalize_domain

Priority = Literal["low", "medium", "high"]


class TrackedKeywordCreate(BaseModel):
    keyword: str = Field(min_length=2, max_length=200)
    url: Optional[str] = None
    search_volume: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[int] = Field(default=None, ge=0, le=100)
    priority: Priority = "medium"
    intent: Optional[str] = None

    @field_validator("keyword")
    @classmethod
    def normalize_keyword(cls, value: str) -> str:
        return " ".join(value.lower().split())


class TrackedKeywordUpdate(BaseModel):
    url: Optional[str] = None
    search_volume: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[int] = Field(default=None, ge=0, le=100)
    priority: Optional[Priority] = None
    intent: Optional[str] = None
    is_active: Optional[bool] = None


class TrackedKeywordResponse(BaseModel):
    id: uuid.UUID
    forum_id: uuid.UUID
    keyword: str
    url: Optional[str]
    search_volume: Optional[int]
    difficulty: Optional[int]
    priority: str
    intent: Optional[str]
    is_active: bool
    current_position: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RankingCreate(BaseModel):
    """Record a search position for a keyword."""
    position: int = Field(ge=1)
    date: Optional[datetime] = None
    clicks: int = Field(default=0, ge=0)
    impressions: int = Field(default=0, ge=0)


class RankingResponse(BaseModel):
    id: uuid.UUID
    keyword_id: uuid.UUID
    date: datetime
    position: int
    previous_position: Optional[int]
    change: int
    clicks: int
    impressions: int
    ctr: float

    class Config:
        from_attributes = True


class KeywordDetail(TrackedKeywordResponse):
    rankings: List[RankingResponse] = []


class CompetitorCreate(BaseModel):
    name: str = Field(min_length=2)
    domain: str
    forum_id: Optional[uuid.UUID] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = []
    domain_authority: Optional[int] = Field(default=None, ge=0, le=100)
    backlinks: Optional[int] = Field(default=None, ge=0)

    @field_validator("domain")
    @classmethod
    def check_domain(cls, value: str) -> str:
        domain = normalize_domain(value)
        if "." not in domain:
            raise ValueError("must be a domain name like example.com")
        return domain


class CompetitorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    industry: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    domain_authority: Optional[int] = Field(default=None, ge=0, le=100)
    backlinks: Optional[int] = Field(default=None, ge=0)
    is_tracked: Optional[bool] = None


class CompetitorResponse(BaseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    forum_id: Optional[uuid.UUID]
    name: str
    domain: str
    industry: Optional[str]
    description: Optional[str]
    strengths: List[str]
    weaknesses: List[str]
    keywords: List[str]
    analysis: Dict[str, Any]
    domain_authority: Optional[int]
    backlinks: Optional[int]
    is_tracked: bool
    last_analyzed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class KeywordAnalysisRequest(BaseModel):
    """Forum-level keyword analysis of the main website."""
    question_count: int = Field(default=10, ge=1, le=30)


class ForumContentGapsRequest(BaseModel):
    topic: str = Field(min_length=2)


class ForumSeoQuestionsRequest(BaseModel):
    topic: str = Field(min_length=2)
    count: int = Field(default=5, ge=1, le=20)
    persona_type: Literal["beginner", "intermediate", "expert", "moderator"] = "beginner"
    save: bool = False

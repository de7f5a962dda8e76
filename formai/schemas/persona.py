"""
AI persona schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from formai.schemas.question import PersonaType


class AIPersonaCreate(BaseModel):
    """Create an AI persona."""
    name: str = Field(min_length=3)
    type: PersonaType
    avatar: Optional[str] = None
    description: str = Field(min_length=10)
    personality: str = Field(min_length=1)
    tone: str = Field(min_length=1)
    response_length: int = Field(default=3, ge=1, le=5)
    expertise_areas: List[str] = []
    is_active: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Dr. Data",
                "type": "expert",
                "description": "Senior analytics consultant with a decade of SEO work",
                "personality": "precise, patient",
                "tone": "professional",
                "response_length": 4,
                "expertise_areas": ["technical SEO", "analytics"]
            }
        }


class AIPersonaUpdate(BaseModel):
    """Update an AI persona."""
    name: Optional[str] = Field(default=None, min_length=3)
    type: Optional[PersonaType] = None
    avatar: Optional[str] = None
    description: Optional[str] = Field(default=None, min_length=10)
    personality: Optional[str] = Field(default=None, min_length=1)
    tone: Optional[str] = Field(default=None, min_length=1)
    response_length: Optional[int] = Field(default=None, ge=1, le=5)
    expertise_areas: Optional[List[str]] = None
    is_active: Optional[bool] = None


class AIPersonaResponse(BaseModel):
    """AI persona response."""
    id: uuid.UUID
    org_id: uuid.UUID
    name: str
    type: str
    avatar: Optional[str]
    description: str
    personality: str
    tone: str
    response_length: int
    expertise_areas: List[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PersonaTestRequest(BaseModel):
    """Sample question used to preview a persona."""
    question_title: str = Field(min_length=5)
    question_content: str = ""


class PersonaFromWebsiteRequest(BaseModel):
    """Draft personas from a website."""
    website_url: str
    count: int = Field(default=3, ge=1, le=10)

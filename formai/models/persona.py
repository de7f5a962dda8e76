"""
AI persona model - the voices used to generate answers.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON

PERSONA_TYPES = ("beginner", "intermediate", "expert", "moderator")


class AIPersona(SQLModel, table=True):
    """
    Configurable AI persona.
    The type selects the base instructions, the rest shapes tone and length.
    """
    __tablename__ = "ai_persona"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)

    name: str = Field(index=True)
    type: str = Field(index=True)  # beginner, intermediate, expert, moderator
    avatar: Optional[str] = None
    description: str
    personality: str
    tone: str

    # 1 = terse, 5 = very detailed
    response_length: int = Field(default=3)

    expertise_areas: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    # Example: ["technical SEO", "link building"]

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

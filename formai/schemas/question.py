"""
Question and answer schemas.
"""
import uuid
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field

PersonaType = Literal["beginner", "intermediate", "expert", "moderator"]


class QuestionCreate(BaseModel):
    """Create a question."""
    title: str = Field(min_length=5, max_length=200)
    content: str = Field(min_length=20)
    category_id: Optional[uuid.UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "How do I connect a custom domain?",
                "content": "I added the CNAME record but the forum still shows the default address."
            }
        }


class QuestionResponse(BaseModel):
    """Question list item."""
    id: uuid.UUID
    forum_id: uuid.UUID
    category_id: Optional[uuid.UUID]
    author_id: Optional[uuid.UUID]
    author_name: Optional[str]
    title: str
    content: str
    views: int
    is_ai_generated: bool
    ai_persona_type: Optional[str]
    source: str
    answer_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuestionDetail(QuestionResponse):
    """Question with author and category details."""
    category_name: Optional[str] = None
    category_slug: Optional[str] = None


class AnswerCreate(BaseModel):
    """Create an answer."""
    content: str = Field(min_length=20)


class AnswerResponse(BaseModel):
    """Answer with its vote score."""
    id: uuid.UUID
    question_id: uuid.UUID
    author_id: Optional[uuid.UUID]
    author_name: Optional[str]
    content: str
    is_ai_generated: bool
    ai_persona_type: Optional[str]
    persona_id: Optional[uuid.UUID]
    score: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VoteRequest(BaseModel):
    """Up- or down-vote an answer."""
    is_upvote: bool = True


class VoteResponse(BaseModel):
    """Vote state after a change."""
    answer_id: uuid.UUID
    is_upvote: Optional[bool]
    score: int


class AIAnswerRequest(BaseModel):
    """Generate an AI answer, with a stored persona or a bare persona type."""
    persona_id: Optional[uuid.UUID] = None
    persona_type: PersonaType = "expert"


class GenerateQuestionsRequest(BaseModel):
    """Generate SEO questions for a forum."""
    topic: str = Field(min_length=2)
    count: int = Field(default=5, ge=1, le=20)
    persona_type: PersonaType = "beginner"
    category_id: Optional[uuid.UUID] = None

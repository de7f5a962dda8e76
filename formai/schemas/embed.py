"""
Embed API request schemas. Widgets post these from third-party pages.

Browser widgets send camelCase keys; snake_case is accepted as well.
"""
import uuid
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from formai.schemas.question import PersonaType


class EmbedRequest(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class EmbedQuestionCreate(EmbedRequest):
    title: str = Field(min_length=5, max_length=200)
    content: str = Field(min_length=20)
    category_id: Optional[uuid.UUID] = None
    author_name: Optional[str] = Field(default=None, max_length=80)


class EmbedAnswerCreate(EmbedRequest):
    content: str = Field(min_length=20)
    author_name: Optional[str] = Field(default=None, max_length=80)


class EmbedVoteRequest(EmbedRequest):
    is_upvote: bool = True


class AnswerPreviewRequest(EmbedRequest):
    question_title: str = Field(min_length=5)
    question_content: str = ""
    persona_type: PersonaType = "expert"


class EmbedLeadFormSubmit(EmbedRequest):
    form_id: uuid.UUID
    form_data: Dict[str, Any]


class TrackFormViewRequest(EmbedRequest):
    form_id: uuid.UUID
    referrer: Optional[str] = None

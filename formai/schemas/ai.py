"""
Request schemas for the AI helper endpoints.
"""
from typing import List
from pydantic import BaseModel, Field

from formai.schemas.question import PersonaType


class GenerateAnswerRequest(BaseModel):
    question_title: str = Field(min_length=5)
    question_content: str = ""
    persona_type: PersonaType = "expert"


class SeoQuestionsRequest(BaseModel):
    topic: str = Field(min_length=2)
    count: int = Field(default=5, ge=1, le=20)
    persona_type: PersonaType = "beginner"


class AnalyzeSeoRequest(BaseModel):
    title: str = Field(min_length=5)
    content: str = ""


class AnalyzeWebsiteRequest(BaseModel):
    url: str
    question_count: int = Field(default=10, ge=1, le=30)


class KeywordDifficultyRequest(BaseModel):
    keywords: List[str] = Field(min_length=1, max_length=50)


class ContentGapsRequest(BaseModel):
    topic: str = Field(min_length=2)
    existing_titles: List[str] = []

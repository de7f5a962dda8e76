"""
Question, answer and vote models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class Question(SQLModel, table=True):
    """
    A question posted to a forum.
    Authored by a dashboard user, an anonymous embed visitor or the AI.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)
    category_id: Optional[uuid.UUID] = Field(default=None, foreign_key="category.id", index=True)
    author_id: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id", index=True)
    author_name: Optional[str] = None

    title: str = Field(index=True)
    content: str
    views: int = Field(default=0)

    is_ai_generated: bool = Field(default=False)
    ai_persona_type: Optional[str] = None
    source: str = Field(default="dashboard", index=True)  # dashboard, embed, ai

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Answer(SQLModel, table=True):
    """An answer to a question, human or AI generated."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    question_id: uuid.UUID = Field(foreign_key="question.id", index=True)
    author_id: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id", index=True)
    author_name: Optional[str] = None

    content: str

    is_ai_generated: bool = Field(default=False)
    ai_persona_type: Optional[str] = None
    persona_id: Optional[uuid.UUID] = Field(default=None, foreign_key="ai_persona.id", index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Vote(SQLModel, table=True):
    """
    One vote per voter per answer.
    voter_key is "user:<id>" for dashboard users and "embed:<forum id>" for widgets.
    """
    __table_args__ = (UniqueConstraint("answer_id", "voter_key", name="uq_vote_answer_voter"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    answer_id: uuid.UUID = Field(foreign_key="answer.id", index=True)
    voter_key: str = Field(index=True)
    is_upvote: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

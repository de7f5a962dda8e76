"""
Lead capture models - forms, submissions and form views.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class LeadForm(SQLModel, table=True):
    """
    Configurable lead capture form attached to a forum.
    """
    __tablename__ = "lead_form"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)

    name: str = Field(index=True)
    description: Optional[str] = None

    form_fields: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    # Example: [{"name": "email", "label": "Email", "type": "email", "required": true},
    #           {"name": "first_name", "label": "First name", "type": "text"}]

    submit_button_text: str = Field(default="Submit")
    success_title: str = Field(default="Thank you!")
    success_message: str = Field(default="Your submission has been received.")
    redirect_url: Optional[str] = None

    form_type: str = Field(default="inline")  # inline, popup, gated
    is_active: bool = Field(default=True)
    gated_content_id: Optional[uuid.UUID] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class LeadSubmission(SQLModel, table=True):
    """A filled-in lead form."""
    __tablename__ = "lead_submission"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    form_id: uuid.UUID = Field(foreign_key="lead_form.id", index=True)

    email: str = Field(index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    form_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_exported: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class LeadFormView(SQLModel, table=True):
    """An impression of a lead form; converting views come from submissions."""
    __tablename__ = "lead_form_view"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    form_id: uuid.UUID = Field(foreign_key="lead_form.id", index=True)

    is_conversion: bool = Field(default=False)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

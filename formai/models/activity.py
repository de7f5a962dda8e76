"""
Activity log model - audit trail for all actions.
Feeds the dashboard activity list.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class ActivityLog(SQLModel, table=True):
    """Activity log entry for a significant action within an organization."""
    __tablename__ = "activity_log"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    actor_id: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id", index=True)

    action: str = Field(index=True)
    entity_type: str = Field(index=True)  # forum, question, persona, lead_form, export...
    entity_id: Optional[uuid.UUID] = None

    description: Optional[str] = None

    meta_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    # Example: {"forum_slug": "acme-help", "source": "embed"}

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class Actions:
    # User actions
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"

    # Forum actions
    FORUM_CREATED = "forum_created"
    FORUM_UPDATED = "forum_updated"
    FORUM_DELETED = "forum_deleted"
    FORUM_DOMAIN_UPDATED = "forum_domain_updated"
    FORUM_DOMAIN_VERIFIED = "forum_domain_verified"
    FORUM_API_KEY_ROTATED = "forum_api_key_rotated"

    # Q&A actions
    QUESTION_CREATED = "question_created"
    QUESTION_DELETED = "question_deleted"
    QUESTIONS_GENERATED = "questions_generated"
    ANSWER_CREATED = "answer_created"
    ANSWER_GENERATED = "answer_generated"
    ANSWER_DELETED = "answer_deleted"

    # Persona actions
    PERSONA_CREATED = "persona_created"
    PERSONA_UPDATED = "persona_updated"
    PERSONA_DELETED = "persona_deleted"

    # Lead capture actions
    LEAD_FORM_CREATED = "lead_form_created"
    LEAD_FORM_UPDATED = "lead_form_updated"
    LEAD_FORM_DELETED = "lead_form_deleted"
    LEAD_SUBMITTED = "lead_submitted"
    LEADS_EXPORTED = "leads_exported"
    GATED_CONTENT_CREATED = "gated_content_created"
    GATED_CONTENT_UPDATED = "gated_content_updated"
    GATED_CONTENT_DELETED = "gated_content_deleted"
    GATED_CONTENT_UNLOCKED = "gated_content_unlocked"

    # SEO actions
    COMPETITOR_ANALYZED = "competitor_analyzed"

    # Privacy actions
    CONSENT_GRANTED = "consent_granted"
    CONSENT_REVOKED = "consent_revoked"
    EXPORT_REQUESTED = "export_requested"
    EXPORT_COMPLETED = "export_completed"
    EXPORT_FAILED = "export_failed"

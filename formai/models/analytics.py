"""
Analytics event model.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class AnalyticsEvent(SQLModel, table=True):
    """
    A tracked front-end event (page view, click, form view...).
    Dashboards aggregate these rows per forum.
    """
    __tablename__ = "analytics_event"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    forum_id: uuid.UUID = Field(foreign_key="forum.id", index=True)

    event_type: str = Field(index=True)  # page_view, question_view, search, click...
    event_category: Optional[str] = None
    event_action: Optional[str] = None
    event_label: Optional[str] = None
    event_value: Optional[float] = None

    session_id: Optional[str] = Field(default=None, index=True)
    path: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None  # desktop, mobile, tablet
    country: Optional[str] = None
    user_id: Optional[uuid.UUID] = None

    additional_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

"""
Privacy models - AI provider consent and data exports.
"""
import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, UniqueConstraint


class ConsentRecord(SQLModel, table=True):
    """Whether an organization agreed to share data with an AI provider."""
    __tablename__ = "consent_record"
    __table_args__ = (
        UniqueConstraint("org_id", "provider", "consent_type", name="uq_consent_org_provider_type"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)

    provider: str = Field(index=True)  # openai, gemini, ...
    consent_type: str = Field(default="data_sharing")  # data_sharing, model_training
    granted: bool = Field(default=False)
    granted_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    consent_version: str

    data_scope: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    # Example: {"content_types": ["questions", "answers"]}

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class DataExport(SQLModel, table=True):
    """
    An anonymized export of organization content for an AI provider.
    Built in the background; the payload is stored once completed.
    """
    __tablename__ = "data_export"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organization.id", index=True)
    requested_by: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id")

    name: str
    description: Optional[str] = None
    provider: str
    format: str = Field(default="json")  # json, csv, xml
    content_types: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    anonymization_level: str = Field(default="standard")  # basic, standard, strict
    masked_keywords: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    status: str = Field(default="pending", index=True)  # pending, processing, completed, failed
    record_count: int = Field(default=0)
    file_size: int = Field(default=0)
    payload: Optional[str] = None
    error: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

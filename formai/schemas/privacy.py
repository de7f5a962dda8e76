"""
Consent and data export schemas.
"""
import uuid
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field

ExportContentType = Literal["questions", "answers", "forums"]


class ConsentRequest(BaseModel):
    provider: str = Field(min_length=2, max_length=50)
    consent_type: str = "data_sharing"
    data_scope: Dict[str, Any] = {}


class ConsentResponse(BaseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    provider: str
    consent_type: str
    granted: bool
    granted_at: Optional[datetime]
    revoked_at: Optional[datetime]
    consent_version: str
    data_scope: Dict[str, Any]
    updated_at: datetime

    class Config:
        from_attributes = True


class DataExportCreate(BaseModel):
    name: str = Field(min_length=3)
    description: Optional[str] = None
    provider: str = Field(min_length=2)
    format: Literal["json", "csv", "xml"] = "json"
    content_types: List[ExportContentType] = ["questions", "answers"]
    anonymization_level: Literal["basic", "standard", "strict"] = "standard"
    masked_keywords: List[str] = []


class DataExportResponse(BaseModel):
    """Export metadata; the payload is fetched through the download endpoint."""
    id: uuid.UUID
    org_id: uuid.UUID
    name: str
    description: Optional[str]
    provider: str
    format: str
    content_types: List[str]
    anonymization_level: str
    status: str
    record_count: int
    file_size: int
    error: Optional[str]
    created_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True

"""
Analytics schemas.
"""
import uuid
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class TrackEventRequest(BaseModel):
    """Public event tracking payload."""
    forum_id: uuid.UUID
    event_type: str = Field(min_length=1, max_length=64)
    event_category: Optional[str] = None
    event_action: Optional[str] = None
    event_label: Optional[str] = None
    event_value: Optional[float] = None
    session_id: Optional[str] = None
    path: Optional[str] = None
    referrer: Optional[str] = None
    device_type: Optional[str] = None
    country: Optional[str] = None
    additional_data: Dict[str, Any] = {}

    class Config:
        json_schema_extra = {
            "example": {
                "forum_id": "0b3d2c1e-5f6a-4b7c-8d9e-0f1a2b3c4d5e",
                "event_type": "page_view",
                "session_id": "s-19f2",
                "path": "/question/123/how-to-start",
                "device_type": "mobile"
            }
        }

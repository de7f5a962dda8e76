"""
Lead capture schemas.
"""
import uuid
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from formai.core.text import is_http_url


class FormField(BaseModel):
    """One input of a lead form."""
    name: str = Field(min_length=1)
    label: str = ""
    type: str = "text"  # text, email, tel, textarea, select, checkbox
    required: bool = False
    placeholder: Optional[str] = None
    options: List[str] = []


def _check_redirect(value: Optional[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    if not is_http_url(value):
        raise ValueError("must be a valid URL or empty")
    return value


class LeadFormCreate(BaseModel):
    """Create a lead form."""
    forum_id: uuid.UUID
    name: str = Field(min_length=3)
    description: Optional[str] = None
    form_fields: List[FormField] = [FormField(name="email", label="Email", type="email", required=True)]
    submit_button_text: str = "Submit"
    success_title: str = "Thank you!"
    success_message: str = "Your submission has been received."
    redirect_url: Optional[str] = None
    form_type: Literal["inline", "popup", "gated"] = "inline"
    is_active: bool = True

    validate_redirect = field_validator("redirect_url")(_check_redirect)

    class Config:
        json_schema_extra = {
            "example": {
                "forum_id": "0b3d2c1e-5f6a-4b7c-8d9e-0f1a2b3c4d5e",
                "name": "Newsletter signup",
                "form_fields": [
                    {"name": "email", "label": "Email", "type": "email", "required": True},
                    {"name": "first_name", "label": "First name", "type": "text"}
                ],
                "redirect_url": ""
            }
        }


class LeadFormUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = None
    form_fields: Optional[List[FormField]] = None
    submit_button_text: Optional[str] = None
    success_title: Optional[str] = None
    success_message: Optional[str] = None
    redirect_url: Optional[str] = None
    form_type: Optional[Literal["inline", "popup", "gated"]] = None
    is_active: Optional[bool] = None

    validate_redirect = field_validator("redirect_url")(_check_redirect)


class LeadFormResponse(BaseModel):
    id: uuid.UUID
    forum_id: uuid.UUID
    name: str
    description: Optional[str]
    form_fields: List[Dict[str, Any]]
    submit_button_text: str
    success_title: str
    success_message: str
    redirect_url: Optional[str]
    form_type: str
    is_active: bool
    gated_content_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadFormStats(BaseModel):
    views: int
    submissions: int
    conversion_rate: float  # percent


class LeadFormDetail(LeadFormResponse):
    stats: LeadFormStats


class LeadSubmissionCreate(BaseModel):
    """Public submission. Keys are the form field names."""
    form_data: Dict[str, Any]


class LeadSubmissionResponse(BaseModel):
    id: uuid.UUID
    form_id: uuid.UUID
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    form_data: Dict[str, Any]
    is_exported: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionResult(BaseModel):
    """What the visitor sees after submitting."""
    success: bool = True
    submission_id: uuid.UUID
    success_title: str
    success_message: str
    redirect_url: Optional[str] = None


class FormViewCreate(BaseModel):
    referrer: Optional[str] = None

"""
Request and response bodies of /api/auth.
"""
import uuid
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    org_name: str = Field(min_length=2, max_length=100, description="Name of the organization to create")
    full_name: Optional[str] = Field(default=None, max_length=100)
    display_name: Optional[str] = Field(default=None, max_length=50)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "founder@example.com",
                "password": "correct-horse-battery",
                "org_name": "Example Analytics",
                "display_name": "Sam from Example"
            }
        }


class RegisterResponse(BaseModel):
    message: str
    user_id: uuid.UUID
    org_id: uuid.UUID


class RefreshRequest(BaseModel):
    refresh_token: str


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Lifetime of the access token in seconds")


class TokenResponse(AccessTokenResponse):
    """Login result; the refresh token is only issued here."""
    refresh_token: str


class CurrentUserResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    current_org_id: Optional[uuid.UUID] = None
    # Membership role in current_org_id
    role: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None

"""
Small response bodies shared by several routers.
"""
from pydantic import BaseModel

from formai import __version__


class MessageResponse(BaseModel):
    message: str

    class Config:
        json_schema_extra = {"example": {"message": "Logged out successfully"}}


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str = __version__

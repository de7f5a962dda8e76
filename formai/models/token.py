"""
Issued refresh tokens, kept so a logout can revoke them before expiry.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class RefreshToken(SQLModel, table=True):
    __tablename__ = "refresh_token"

    # The jti claim of the JWT; the token itself is only stored as a digest
    jti: str = Field(primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    token_hash: str = Field(index=True)

    user_agent: Optional[str] = None
    ip_address: Optional[str] = None

    issued_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime
    revoked_at: Optional[datetime] = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        return not self.revoked and self.expires_at >= (now or datetime.utcnow())

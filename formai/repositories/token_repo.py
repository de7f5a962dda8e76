"""
Refresh token store.
"""
import hashlib
import uuid
from typing import Optional
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.token import RefreshToken
from formai.repositories.base import BaseRepository
from formai.config import settings


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RefreshTokenRepository(BaseRepository[RefreshToken]):

    def __init__(self, session: AsyncSession):
        super().__init__(RefreshToken, session)

    async def create_token(
        self,
        user_id: uuid.UUID,
        jti: str,
        token: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> RefreshToken:
        return await self.create({
            "jti": jti,
            "user_id": user_id,
            "token_hash": token_digest(token),
            "user_agent": user_agent,
            "ip_address": ip_address,
            "expires_at": datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        })

    async def get_by_jti(self, jti: Optional[str]) -> Optional[RefreshToken]:
        if not jti:
            return None
        return await self.get(jti)

    async def revoke(self, token: RefreshToken) -> RefreshToken:
        token.revoked_at = datetime.utcnow()
        return await self.save(token)

    async def is_valid(self, jti: Optional[str]) -> bool:
        """False for unknown, revoked and expired tokens."""
        token = await self.get_by_jti(jti)
        return bool(token and token.is_usable())

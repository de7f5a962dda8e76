"""
AI persona repository.
"""
import uuid
from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.persona import AIPersona
from formai.repositories.base import BaseRepository


class AIPersonaRepository(BaseRepository[AIPersona]):
    """Repository for AIPersona operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AIPersona, session)

    async def get_active(self, org_id: uuid.UUID) -> List[AIPersona]:
        """Get all active personas for an organization."""
        query = select(AIPersona).where(
            AIPersona.org_id == org_id,
            AIPersona.is_active == True
        ).order_by(AIPersona.created_at.desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def get_first_of_type(self, org_id: uuid.UUID, persona_type: str) -> Optional[AIPersona]:
        """First active persona of the given type, used when none is chosen explicitly."""
        query = select(AIPersona).where(
            AIPersona.org_id == org_id,
            AIPersona.type == persona_type,
            AIPersona.is_active == True
        ).order_by(AIPersona.created_at)
        result = await self.session.exec(query)
        return result.first()

"""
Append-only audit trail behind the dashboard activity feed.
"""
import uuid
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.activity import ActivityLog
from formai.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog]):

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityLog, session)

    async def log(
        self,
        org_id: uuid.UUID,
        action: str,
        entity_type: str,
        entity_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
        description: Optional[str] = None,
        meta_data: Optional[dict] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> ActivityLog:
        """Record one action; ``action`` is one of the ``Actions`` constants."""
        return await self.create({
            "org_id": org_id,
            "actor_id": actor_id,
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "description": description,
            "meta_data": meta_data or {},
            "ip_address": ip_address,
            "user_agent": user_agent,
        })

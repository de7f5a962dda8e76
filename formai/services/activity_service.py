"""
Activity service - dashboard activity feed.
"""
import uuid
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from formai.repositories.activity_repo import ActivityLogRepository


class ActivityService:
    """Service for reading the activity log."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activity_repo = ActivityLogRepository(session)

    async def list_activity(
        self,
        org_id: uuid.UUID,
        page: int = 1,
        limit: int = 20,
        entity_type: Optional[str] = None
    ) -> dict:
        """Newest entries first, one page at a time."""
        return await self.activity_repo.list_paginated(
            org_id=org_id,
            filters={"entity_type": entity_type},
            page=page,
            limit=limit
        )

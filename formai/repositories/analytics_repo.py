"""
Analytics event repository - aggregate queries over tracked events.
"""
import uuid
from typing import Optional, List, Dict
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from formai.models.analytics import AnalyticsEvent
from formai.repositories.base import BaseRepository


class AnalyticsEventRepository(BaseRepository[AnalyticsEvent]):
    """Repository for AnalyticsEvent operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AnalyticsEvent, session)

    def _scoped(self, query, forum_ids: List[uuid.UUID], since: Optional[datetime]):
        query = query.where(AnalyticsEvent.forum_id.in_(forum_ids))
        if since:
            query = query.where(AnalyticsEvent.created_at >= since)
        return query

    async def count_events(
        self,
        forum_ids: List[uuid.UUID],
        since: Optional[datetime] = None,
        event_type: Optional[str] = None
    ) -> int:
        if not forum_ids:
            return 0
        query = self._scoped(select(func.count()).select_from(AnalyticsEvent), forum_ids, since)
        if event_type:
            query = query.where(AnalyticsEvent.event_type == event_type)
        result = await self.session.exec(query)
        return result.one()

    async def count_sessions(self, forum_ids: List[uuid.UUID], since: Optional[datetime] = None) -> int:
        """Distinct non-empty session ids."""
        if not forum_ids:
            return 0
        query = self._scoped(
            select(func.count(func.distinct(AnalyticsEvent.session_id))),
            forum_ids,
            since,
        ).where(AnalyticsEvent.session_id.is_not(None))
        result = await self.session.exec(query)
        return result.one()

    async def count_by(
        self,
        column: str,
        forum_ids: List[uuid.UUID],
        since: Optional[datetime] = None,
        event_type: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict[str, int]:
        """Event counts grouped by one column, largest first."""
        if not forum_ids:
            return {}
        field = getattr(AnalyticsEvent, column)
        total = func.count(AnalyticsEvent.id)
        query = self._scoped(select(field, total), forum_ids, since)
        if event_type:
            query = query.where(AnalyticsEvent.event_type == event_type)
        query = query.group_by(field).order_by(total.desc())
        if limit:
            query = query.limit(limit)
        result = await self.session.exec(query)
        return {(key or "unknown"): count for key, count in result.all()}

    async def timestamps(
        self,
        forum_ids: List[uuid.UUID],
        since: datetime,
        event_type: Optional[str] = None
    ) -> List[datetime]:
        """Creation times of matching events, bucketed by the caller."""
        if not forum_ids:
            return []
        query = self._scoped(select(AnalyticsEvent.created_at), forum_ids, since)
        if event_type:
            query = query.where(AnalyticsEvent.event_type == event_type)
        result = await self.session.exec(query)
        return list(result.all())

    async def recent(self, forum_ids: List[uuid.UUID], since: datetime, limit: int = 50) -> List[AnalyticsEvent]:
        if not forum_ids:
            return []
        query = (
            self._scoped(select(AnalyticsEvent), forum_ids, since)
            .order_by(AnalyticsEvent.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return list(result.all())

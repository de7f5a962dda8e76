"""
Keyword tracking and competitor repositories.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.seo import TrackedKeyword, KeywordRanking
from formai.models.competitor import Competitor
from formai.repositories.base import BaseRepository


class TrackedKeywordRepository(BaseRepository[TrackedKeyword]):
    """Repository for TrackedKeyword operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(TrackedKeyword, session)

    async def get_by_keyword(self, forum_id: uuid.UUID, keyword: str) -> Optional[TrackedKeyword]:
        query = select(TrackedKeyword).where(
            TrackedKeyword.forum_id == forum_id,
            TrackedKeyword.keyword == keyword
        )
        result = await self.session.exec(query)
        return result.first()

    async def list_for_forum(self, forum_id: uuid.UUID) -> List[TrackedKeyword]:
        return await self.list(filters={"forum_id": forum_id})


class KeywordRankingRepository(BaseRepository[KeywordRanking]):
    """Repository for KeywordRanking operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(KeywordRanking, session)

    async def latest(self, keyword_id: uuid.UUID) -> Optional[KeywordRanking]:
        query = (
            select(KeywordRanking)
            .where(KeywordRanking.keyword_id == keyword_id)
            .order_by(KeywordRanking.date.desc())
        )
        result = await self.session.exec(query)
        return result.first()

    async def history(self, keyword_id: uuid.UUID, limit: int = 90) -> List[KeywordRanking]:
        return await self.list(filters={"keyword_id": keyword_id}, order_by="date", order_desc=False, limit=limit)


class CompetitorRepository(BaseRepository[Competitor]):
    """Repository for Competitor operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Competitor, session)

    async def list_for_org(
        self,
        org_id: uuid.UUID,
        forum_id: Optional[uuid.UUID] = None,
        tracked_only: bool = False
    ) -> List[Competitor]:
        filters = {"forum_id": forum_id}
        if tracked_only:
            filters["is_tracked"] = True
        return await self.list(org_id=org_id, filters=filters)

"""
Main-site page and content interlink repositories.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.interlink import MainSitePage, ContentInterlink
from formai.repositories.base import BaseRepository


class MainSitePageRepository(BaseRepository[MainSitePage]):
    """Repository for MainSitePage operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(MainSitePage, session)

    async def get_by_slug(self, org_id: uuid.UUID, slug: str) -> Optional[MainSitePage]:
        query = select(MainSitePage).where(
            MainSitePage.org_id == org_id,
            MainSitePage.slug == slug
        )
        result = await self.session.exec(query)
        return result.first()


class ContentInterlinkRepository(BaseRepository[ContentInterlink]):
    """Repository for ContentInterlink operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ContentInterlink, session)

    async def find(
        self,
        source_type: str,
        source_id: uuid.UUID,
        target_type: str,
        target_id: uuid.UUID
    ) -> Optional[ContentInterlink]:
        query = select(ContentInterlink).where(
            ContentInterlink.source_type == source_type,
            ContentInterlink.source_id == source_id,
            ContentInterlink.target_type == target_type,
            ContentInterlink.target_id == target_id
        )
        result = await self.session.exec(query)
        return result.first()

    async def list_by_source(
        self,
        org_id: uuid.UUID,
        source_type: str,
        source_id: uuid.UUID
    ) -> List[ContentInterlink]:
        return await self.list(
            org_id=org_id,
            filters={"source_type": source_type, "source_id": source_id},
            order_by="relevance_score",
        )

    async def list_by_target(
        self,
        org_id: uuid.UUID,
        target_type: str,
        target_id: uuid.UUID
    ) -> List[ContentInterlink]:
        return await self.list(
            org_id=org_id,
            filters={"target_type": target_type, "target_id": target_id},
            order_by="relevance_score",
        )

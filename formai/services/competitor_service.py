"""
Competitor service - competitor tracking and AI analysis.
"""
import uuid
import logging
from datetime import datetime
from typing import Optional, List

from fastapi.concurrency import run_in_threadpool
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.core.exceptions import raise_not_found
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.seo_repo import CompetitorRepository, TrackedKeywordRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.competitor import Competitor
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.seo import CompetitorCreate, CompetitorUpdate
from formai.services.ai_service import AIContentService, ai_service

logger = logging.getLogger(__name__)


class CompetitorService:
    """Service for competitor operations."""

    def __init__(self, session: AsyncSession, ai: AIContentService = None):
        self.session = session
        self.ai = ai or ai_service
        self.forum_repo = ForumRepository(session)
        self.competitor_repo = CompetitorRepository(session)
        self.keyword_repo = TrackedKeywordRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def _check_forum(self, org_id: uuid.UUID, forum_id: Optional[uuid.UUID]) -> None:
        if forum_id:
            forum = await self.forum_repo.get_owned(forum_id, org_id)
            if not forum:
                raise_not_found("Forum", str(forum_id))

    async def list(self, org_id: uuid.UUID, forum_id: Optional[uuid.UUID] = None) -> List[Competitor]:
        return await self.competitor_repo.list_for_org(org_id, forum_id=forum_id)

    async def get(self, org_id: uuid.UUID, competitor_id: uuid.UUID) -> Competitor:
        competitor = await self.competitor_repo.get_owned(competitor_id, org_id)
        if not competitor:
            raise_not_found("Competitor", str(competitor_id))
        return competitor

    async def create(self, org_id: uuid.UUID, competitor_data: CompetitorCreate) -> Competitor:
        await self._check_forum(org_id, competitor_data.forum_id)
        data = competitor_data.model_dump()
        data["org_id"] = org_id
        data["keywords"] = [k.strip().lower() for k in data["keywords"] if k.strip()]
        return await self.competitor_repo.create(data)

    async def update(self, org_id: uuid.UUID, competitor_id: uuid.UUID, competitor_data: CompetitorUpdate) -> Competitor:
        competitor = await self.get(org_id, competitor_id)
        update_data = competitor_data.model_dump(exclude_unset=True)
        if update_data.get("keywords") is not None:
            update_data["keywords"] = [k.strip().lower() for k in update_data["keywords"] if k.strip()]
        return await self.competitor_repo.update(competitor.id, update_data)

    async def delete(self, org_id: uuid.UUID, competitor_id: uuid.UUID) -> None:
        competitor = await self.get(org_id, competitor_id)
        await self.competitor_repo.delete(competitor.id)

    async def analyze(self, user: User, competitor_id: uuid.UUID) -> Competitor:
        """Run the AI analysis and keep the result on the competitor."""
        competitor = await self.get(user.current_org_id, competitor_id)
        analysis = await run_in_threadpool(self.ai.analyze_competitor, {
            "name": competitor.name,
            "domain": competitor.domain,
            "industry": competitor.industry,
            "description": competitor.description,
            "keywords": competitor.keywords,
        })

        competitor.analysis = analysis
        if analysis.get("strengths"):
            competitor.strengths = analysis["strengths"]
        if analysis.get("weaknesses"):
            competitor.weaknesses = analysis["weaknesses"]
        competitor.last_analyzed_at = datetime.utcnow()
        competitor.updated_at = datetime.utcnow()
        competitor = await self.competitor_repo.save(competitor)

        await self.activity_repo.log(
            org_id=competitor.org_id,
            actor_id=user.id,
            action=Actions.COMPETITOR_ANALYZED,
            entity_type="competitor",
            entity_id=competitor.id,
            description=f"Competitor '{competitor.name}' analyzed"
        )
        return competitor

    async def keyword_gaps(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> List[dict]:
        """Keywords used by tracked competitors that the forum does not track."""
        await self._check_forum(org_id, forum_id)
        tracked = {k.keyword.lower() for k in await self.keyword_repo.list_for_forum(forum_id)}

        gaps = {}
        for competitor in await self.competitor_repo.list_for_org(org_id, tracked_only=True):
            if competitor.forum_id and competitor.forum_id != forum_id:
                continue
            for keyword in competitor.keywords or []:
                keyword = keyword.lower()
                if keyword in tracked:
                    continue
                gaps.setdefault(keyword, []).append(competitor.name)

        return sorted(
            ({"keyword": k, "competitors": sorted(names)} for k, names in gaps.items()),
            key=lambda gap: (-len(gap["competitors"]), gap["keyword"])
        )

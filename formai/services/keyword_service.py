"""
Keyword service - tracked keywords, rankings and forum-level SEO analysis.
"""
import uuid
import logging
from datetime import datetime
from typing import List

from fastapi.concurrency import run_in_threadpool
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.core.exceptions import raise_not_found, raise_bad_request, raise_already_exists
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.question_repo import QuestionRepository
from formai.repositories.seo_repo import TrackedKeywordRepository, KeywordRankingRepository
from formai.models.forum import Forum
from formai.models.seo import TrackedKeyword, KeywordRanking
from formai.models.user import User
from formai.schemas.seo import TrackedKeywordCreate, TrackedKeywordUpdate, RankingCreate, ForumSeoQuestionsRequest
from formai.schemas.question import GenerateQuestionsRequest
from formai.services.ai_service import AIContentService, ai_service
from formai.services.question_service import QuestionService

logger = logging.getLogger(__name__)


class KeywordService:
    """Service for keyword tracking and analysis."""

    def __init__(self, session: AsyncSession, ai: AIContentService = None):
        self.session = session
        self.ai = ai or ai_service
        self.forum_repo = ForumRepository(session)
        self.question_repo = QuestionRepository(session)
        self.keyword_repo = TrackedKeywordRepository(session)
        self.ranking_repo = KeywordRankingRepository(session)

    async def _forum(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> Forum:
        forum = await self.forum_repo.get_owned(forum_id, org_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))
        return forum

    async def _keyword(self, org_id: uuid.UUID, keyword_id: uuid.UUID) -> TrackedKeyword:
        keyword = await self.keyword_repo.get(keyword_id)
        if keyword:
            forum = await self.forum_repo.get(keyword.forum_id)
            if forum and forum.org_id == org_id:
                return keyword
        raise_not_found("Keyword", str(keyword_id))

    async def _with_position(self, keyword: TrackedKeyword) -> dict:
        latest = await self.ranking_repo.latest(keyword.id)
        return {**keyword.model_dump(), "current_position": latest.position if latest else None}

    # Tracked keywords

    async def list(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> List[dict]:
        forum = await self._forum(org_id, forum_id)
        return [await self._with_position(k) for k in await self.keyword_repo.list_for_forum(forum.id)]

    async def create(self, org_id: uuid.UUID, forum_id: uuid.UUID, keyword_data: TrackedKeywordCreate) -> dict:
        forum = await self._forum(org_id, forum_id)
        if await self.keyword_repo.get_by_keyword(forum.id, keyword_data.keyword):
            raise_already_exists("Keyword", "keyword", keyword_data.keyword)
        keyword = await self.keyword_repo.create({**keyword_data.model_dump(), "forum_id": forum.id})
        return await self._with_position(keyword)

    async def update(self, org_id: uuid.UUID, keyword_id: uuid.UUID, keyword_data: TrackedKeywordUpdate) -> dict:
        keyword = await self._keyword(org_id, keyword_id)
        keyword = await self.keyword_repo.update(keyword.id, keyword_data.model_dump(exclude_unset=True))
        return await self._with_position(keyword)

    async def delete(self, org_id: uuid.UUID, keyword_id: uuid.UUID) -> None:
        keyword = await self._keyword(org_id, keyword_id)
        for ranking in await self.ranking_repo.list(filters={"keyword_id": keyword.id}):
            await self.session.delete(ranking)
        await self.keyword_repo.delete(keyword.id)

    async def detail(self, org_id: uuid.UUID, keyword_id: uuid.UUID) -> dict:
        """Keyword with its ranking history, oldest first."""
        keyword = await self._keyword(org_id, keyword_id)
        history = await self.ranking_repo.history(keyword.id)
        data = await self._with_position(keyword)
        data["rankings"] = history
        return data

    async def record_ranking(self, org_id: uuid.UUID, keyword_id: uuid.UUID, ranking_data: RankingCreate) -> KeywordRanking:
        """Store a position. A positive change means the keyword moved up."""
        keyword = await self._keyword(org_id, keyword_id)
        previous = await self.ranking_repo.latest(keyword.id)

        ctr = 0.0
        if ranking_data.impressions:
            ctr = round(ranking_data.clicks / ranking_data.impressions * 100, 2)

        return await self.ranking_repo.create({
            "keyword_id": keyword.id,
            "date": ranking_data.date or datetime.utcnow(),
            "position": ranking_data.position,
            "previous_position": previous.position if previous else None,
            "change": previous.position - ranking_data.position if previous else 0,
            "clicks": ranking_data.clicks,
            "impressions": ranking_data.impressions,
            "ctr": ctr,
        })

    # Forum-level AI analysis

    async def analyze_website(self, org_id: uuid.UUID, forum_id: uuid.UUID, question_count: int) -> dict:
        forum = await self._forum(org_id, forum_id)
        if not forum.main_website_url:
            raise_bad_request("Forum has no main website URL")
        logger.info(f"Analyzing keywords of {forum.main_website_url} for forum {forum.id}")
        return await run_in_threadpool(self.ai.analyze_website_keywords, forum.main_website_url, question_count)

    async def difficulty(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> List[dict]:
        """Difficulty estimates for every active tracked keyword of the forum."""
        forum = await self._forum(org_id, forum_id)
        keywords = [k.keyword for k in await self.keyword_repo.list_for_forum(forum.id) if k.is_active]
        if not keywords:
            return []
        return await run_in_threadpool(self.ai.keyword_difficulty, keywords)

    async def content_gaps(self, org_id: uuid.UUID, forum_id: uuid.UUID, topic: str) -> List[dict]:
        forum = await self._forum(org_id, forum_id)
        titles = await self.question_repo.list_titles(forum.id)
        return await run_in_threadpool(self.ai.content_gaps, topic, titles)

    async def seo_questions(self, user: User, forum_id: uuid.UUID, request: ForumSeoQuestionsRequest) -> List[dict]:
        """Question ideas for the forum; stored as AI questions when `save` is set."""
        forum = await self._forum(user.current_org_id, forum_id)
        if request.save:
            questions = QuestionService(self.session, ai=self.ai)
            return await questions.generate_questions(
                user,
                forum.id,
                GenerateQuestionsRequest(
                    topic=request.topic, count=request.count, persona_type=request.persona_type
                )
            )
        return await run_in_threadpool(
            self.ai.generate_seo_questions, request.topic, request.count, request.persona_type
        )

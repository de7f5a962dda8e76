"""
Interlink service - main-site pages, content links and link suggestions.
"""
import re
import uuid
import logging
from collections import Counter
from typing import Optional, List

from fastapi.concurrency import run_in_threadpool
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.core.exceptions import raise_not_found, raise_bad_request, raise_already_exists
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.question_repo import QuestionRepository, AnswerRepository
from formai.repositories.interlink_repo import MainSitePageRepository, ContentInterlinkRepository
from formai.models.interlink import MainSitePage, ContentInterlink
from formai.models.user import User
from formai.schemas.interlink import MainSitePageCreate, MainSitePageUpdate, InterlinkCreate
from formai.services.ai_service import AIContentService, ai_service

logger = logging.getLogger(__name__)

RELEVANCE_THRESHOLD = 50
CANDIDATE_LIMIT = 500
_WORD_SPLIT = re.compile(r"\W+")


def significant_words(text: str) -> set:
    """Lowercase words longer than four characters."""
    return {w for w in _WORD_SPLIT.split((text or "").lower()) if len(w) > 4}


def calculate_relevance(source_title: str, source_content: str, target_title: str, target_content: str) -> int:
    """
    Keyword-overlap relevance between two pieces of content, 0-100.

    80 points scale with the share of shared significant words (relative to
    the smaller text); 20 more when one title contains the other.
    """
    source_words = significant_words(f"{source_title} {source_content}")
    target_words = significant_words(f"{target_title} {target_content}")
    if not source_words or not target_words:
        return 0

    matches = len(source_words & target_words)
    score = int(matches / min(len(source_words), len(target_words)) * 80)

    source_lower = (source_title or "").lower()
    target_lower = (target_title or "").lower()
    if source_lower and target_lower and (source_lower in target_lower or target_lower in source_lower):
        score += 20
    return min(score, 100)


class InterlinkService:
    """Service for interlinking operations."""

    def __init__(self, session: AsyncSession, ai: AIContentService = None):
        self.session = session
        self.ai = ai or ai_service
        self.forum_repo = ForumRepository(session)
        self.question_repo = QuestionRepository(session)
        self.answer_repo = AnswerRepository(session)
        self.page_repo = MainSitePageRepository(session)
        self.link_repo = ContentInterlinkRepository(session)

    # Main site pages

    async def create_page(self, org_id: uuid.UUID, page_data: MainSitePageCreate) -> MainSitePage:
        if await self.page_repo.get_by_slug(org_id, page_data.slug):
            raise_already_exists("Page", "slug", page_data.slug)
        return await self.page_repo.create({**page_data.model_dump(), "org_id": org_id})

    async def get_page(self, org_id: uuid.UUID, page_id: uuid.UUID) -> MainSitePage:
        page = await self.page_repo.get_owned(page_id, org_id)
        if not page:
            raise_not_found("Page", str(page_id))
        return page

    async def get_page_by_slug(self, org_id: uuid.UUID, slug: str) -> MainSitePage:
        page = await self.page_repo.get_by_slug(org_id, slug)
        if not page:
            raise_not_found("Page")
        return page

    async def list_pages(self, org_id: uuid.UUID) -> List[MainSitePage]:
        return await self.page_repo.list(org_id)

    async def update_page(self, org_id: uuid.UUID, page_id: uuid.UUID, page_data: MainSitePageUpdate) -> MainSitePage:
        page = await self.get_page(org_id, page_id)
        return await self.page_repo.update(page.id, page_data.model_dump(exclude_unset=True))

    async def delete_page(self, org_id: uuid.UUID, page_id: uuid.UUID) -> None:
        page = await self.get_page(org_id, page_id)
        for link in await self.link_repo.list_by_source(org_id, "main_page", page.id):
            await self.link_repo.delete(link.id)
        for link in await self.link_repo.list_by_target(org_id, "main_page", page.id):
            await self.link_repo.delete(link.id)
        await self.page_repo.delete(page.id)

    # Content resolution

    async def resolve(self, org_id: uuid.UUID, content_type: str, content_id: uuid.UUID) -> dict:
        """Title, text and forum of a question, answer or main page of the organization."""
        if content_type == "main_page":
            page = await self.page_repo.get(content_id)
            if page and page.org_id == org_id:
                return {"title": page.title, "content": page.content, "forum_id": None}
        elif content_type == "question":
            question = await self.question_repo.get(content_id)
            if question:
                forum = await self.forum_repo.get(question.forum_id)
                if forum and forum.org_id == org_id:
                    return {"title": question.title, "content": question.content, "forum_id": forum.id}
        elif content_type == "answer":
            answer = await self.answer_repo.get(content_id)
            if answer:
                question = await self.question_repo.get(answer.question_id)
                forum = await self.forum_repo.get(question.forum_id) if question else None
                if forum and forum.org_id == org_id:
                    return {"title": question.title, "content": answer.content, "forum_id": forum.id}
        raise_not_found(content_type.replace("_", " ").capitalize(), str(content_id))

    async def _candidates(self, org_id: uuid.UUID, source_type: str, source_id: uuid.UUID) -> List[dict]:
        candidates = []
        if source_type != "main_page":
            for page in await self.page_repo.list(org_id, limit=CANDIDATE_LIMIT):
                candidates.append({
                    "id": page.id, "type": "main_page", "title": page.title, "content": page.content
                })
        if source_type != "question":
            forum_ids = await self.forum_repo.list_ids_for_org(org_id)
            for question in await self.question_repo.list_for_forums(forum_ids, CANDIDATE_LIMIT):
                candidates.append({
                    "id": question.id, "type": "question", "title": question.title, "content": question.content
                })
        return [c for c in candidates if not (c["type"] == source_type and c["id"] == source_id)]

    # Interlinks

    async def create_link(self, user: User, link_data: InterlinkCreate) -> ContentInterlink:
        org_id = user.current_org_id
        if link_data.source_type == link_data.target_type and link_data.source_id == link_data.target_id:
            raise_bad_request("Content cannot link to itself")

        source = await self.resolve(org_id, link_data.source_type, link_data.source_id)
        target = await self.resolve(org_id, link_data.target_type, link_data.target_id)

        existing = await self.link_repo.find(
            link_data.source_type, link_data.source_id, link_data.target_type, link_data.target_id
        )
        if existing:
            raise_bad_request("This interlink already exists")

        data = link_data.model_dump()
        data["org_id"] = org_id
        data["created_by"] = user.id
        data["forum_id"] = data.get("forum_id") or source["forum_id"] or target["forum_id"]
        return await self.link_repo.create(data)

    async def list_by_source(self, org_id: uuid.UUID, source_type: str, source_id: uuid.UUID) -> List[ContentInterlink]:
        return await self.link_repo.list_by_source(org_id, source_type, source_id)

    async def list_by_target(self, org_id: uuid.UUID, target_type: str, target_id: uuid.UUID) -> List[ContentInterlink]:
        return await self.link_repo.list_by_target(org_id, target_type, target_id)

    async def list_for_forum(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> List[ContentInterlink]:
        forum = await self.forum_repo.get_owned(forum_id, org_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))
        return await self.link_repo.list(org_id, filters={"forum_id": forum.id})

    async def delete_link(self, org_id: uuid.UUID, link_id: uuid.UUID) -> None:
        link = await self.link_repo.get_owned(link_id, org_id)
        if not link:
            raise_not_found("Interlink", str(link_id))
        await self.link_repo.delete(link.id)

    async def relevant_content(
        self,
        org_id: uuid.UUID,
        content_type: str,
        content_id: uuid.UUID,
        limit: int = 5
    ) -> List[dict]:
        """Candidate link targets scored by keyword overlap."""
        source = await self.resolve(org_id, content_type, content_id)
        results = []
        for candidate in await self._candidates(org_id, content_type, content_id):
            score = calculate_relevance(
                source["title"], source["content"], candidate["title"], candidate["content"]
            )
            if score > RELEVANCE_THRESHOLD:
                results.append({
                    "content_type": candidate["type"],
                    "content_id": candidate["id"],
                    "title": candidate["title"],
                    "relevance_score": score,
                })
        results.sort(key=lambda r: r["relevance_score"], reverse=True)
        return results[:limit]

    async def ai_suggestions(
        self,
        org_id: uuid.UUID,
        content_type: str,
        content_id: uuid.UUID,
        limit: int = 5
    ) -> List[dict]:
        """Model-proposed links with anchor text."""
        source = await self.resolve(org_id, content_type, content_id)
        candidates = await self._candidates(org_id, content_type, content_id)
        targets = [{"id": str(c["id"]), "type": c["type"], "title": c["title"]} for c in candidates[:50]]
        return await run_in_threadpool(
            self.ai.generate_interlinking_suggestions,
            source["title"],
            source["content"],
            content_type,
            targets,
            limit,
        )

    async def stats(self, org_id: uuid.UUID, forum_id: Optional[uuid.UUID] = None) -> dict:
        """Link type distribution, monthly growth, automatic share and mean relevance."""
        links = await self.link_repo.list(org_id, filters={"forum_id": forum_id})

        distribution = Counter(f"{l.source_type} to {l.target_type}" for l in links)
        growth = Counter(l.created_at.strftime("%Y-%m") for l in links)
        automatic = sum(1 for l in links if l.automatic)
        average = round(sum(l.relevance_score for l in links) / len(links), 1) if links else 0

        return {
            "total": len(links),
            "link_types": dict(distribution),
            "monthly_growth": [{"month": month, "count": growth[month]} for month in sorted(growth)],
            "automatic": automatic,
            "manual": len(links) - automatic,
            "average_relevance": average,
        }

"""
Forum, category and domain verification repositories.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import delete, func, update

from formai.models.forum import Forum, Category, DomainVerification
from formai.models.question import Question, Answer, Vote
from formai.models.lead import LeadForm, LeadSubmission, LeadFormView
from formai.models.gated import GatedContent
from formai.models.seo import TrackedKeyword, KeywordRanking
from formai.models.analytics import AnalyticsEvent
from formai.models.interlink import ContentInterlink
from formai.models.competitor import Competitor
from formai.repositories.base import BaseRepository


class ForumRepository(BaseRepository[Forum]):
    """Repository for Forum operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Forum, session)

    async def get_by_slug(self, slug: str) -> Optional[Forum]:
        return await self.get_by_field("slug", slug)

    async def get_by_subdomain(self, subdomain: str) -> Optional[Forum]:
        return await self.get_by_field("subdomain", subdomain.lower())

    async def get_by_custom_domain(self, domain: str) -> Optional[Forum]:
        return await self.get_by_field("custom_domain", domain.lower())

    async def list_for_org(self, org_id: uuid.UUID) -> List[Forum]:
        """Forums of an organization, newest first."""
        return await self.list(org_id=org_id)

    async def list_ids_for_org(self, org_id: uuid.UUID) -> List[uuid.UUID]:
        query = select(Forum.id).where(Forum.org_id == org_id)
        result = await self.session.exec(query)
        return list(result.all())

    async def content_totals(self, forum_id: uuid.UUID) -> dict:
        """Question and answer totals for a forum."""
        questions = await self.session.exec(
            select(func.count()).select_from(Question).where(Question.forum_id == forum_id)
        )
        answers = await self.session.exec(
            select(func.count())
            .select_from(Answer)
            .join(Question, Answer.question_id == Question.id)
            .where(Question.forum_id == forum_id)
        )
        return {"question_count": questions.one(), "answer_count": answers.one()}

    async def delete_cascade(self, forum: Forum) -> None:
        """Delete a forum together with everything stored under it."""
        forum_id = forum.id
        question_ids = select(Question.id).where(Question.forum_id == forum_id)
        answer_ids = select(Answer.id).where(Answer.question_id.in_(question_ids))
        form_ids = select(LeadForm.id).where(LeadForm.forum_id == forum_id)
        keyword_ids = select(TrackedKeyword.id).where(TrackedKeyword.forum_id == forum_id)

        statements = [
            delete(Vote).where(Vote.answer_id.in_(answer_ids)),
            delete(Answer).where(Answer.question_id.in_(question_ids)),
            delete(Question).where(Question.forum_id == forum_id),
            delete(Category).where(Category.forum_id == forum_id),
            delete(DomainVerification).where(DomainVerification.forum_id == forum_id),
            delete(GatedContent).where(GatedContent.forum_id == forum_id),
            delete(LeadSubmission).where(LeadSubmission.form_id.in_(form_ids)),
            delete(LeadFormView).where(LeadFormView.form_id.in_(form_ids)),
            delete(LeadForm).where(LeadForm.forum_id == forum_id),
            delete(KeywordRanking).where(KeywordRanking.keyword_id.in_(keyword_ids)),
            delete(TrackedKeyword).where(TrackedKeyword.forum_id == forum_id),
            delete(AnalyticsEvent).where(AnalyticsEvent.forum_id == forum_id),
            delete(ContentInterlink).where(ContentInterlink.forum_id == forum_id),
            update(Competitor).where(Competitor.forum_id == forum_id).values(forum_id=None),
        ]
        for statement in statements:
            await self.session.execute(statement)

        await self.session.delete(forum)
        await self.session.commit()


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Category, session)

    async def list_for_forum(self, forum_id: uuid.UUID) -> List[Category]:
        query = select(Category).where(Category.forum_id == forum_id).order_by(Category.name)
        result = await self.session.exec(query)
        return list(result.all())

    async def get_by_slug(self, forum_id: uuid.UUID, slug: str) -> Optional[Category]:
        query = select(Category).where(Category.forum_id == forum_id, Category.slug == slug)
        result = await self.session.exec(query)
        return result.first()


class DomainVerificationRepository(BaseRepository[DomainVerification]):
    """Repository for DomainVerification operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(DomainVerification, session)

    async def get_by_domain(self, domain: str) -> Optional[DomainVerification]:
        return await self.get_by_field("domain", domain.lower())

"""
Lead capture repositories - forms, submissions, views and gated content.
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import delete, func, update

from formai.models.lead import LeadForm, LeadSubmission, LeadFormView
from formai.models.gated import GatedContent
from formai.repositories.base import BaseRepository


class LeadFormRepository(BaseRepository[LeadForm]):
    """Repository for LeadForm operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadForm, session)

    async def list_for_forums(self, forum_ids: List[uuid.UUID]) -> List[LeadForm]:
        if not forum_ids:
            return []
        query = (
            select(LeadForm)
            .where(LeadForm.forum_id.in_(forum_ids))
            .order_by(LeadForm.created_at.desc())
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def delete_with_submissions(self, form: LeadForm) -> None:
        """Delete a form with its submissions and views, detaching gated content."""
        await self.session.execute(
            update(GatedContent).where(GatedContent.form_id == form.id).values(form_id=None)
        )
        await self.session.execute(delete(LeadSubmission).where(LeadSubmission.form_id == form.id))
        await self.session.execute(delete(LeadFormView).where(LeadFormView.form_id == form.id))
        await self.session.delete(form)
        await self.session.commit()


class LeadSubmissionRepository(BaseRepository[LeadSubmission]):
    """Repository for LeadSubmission operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadSubmission, session)

    async def list_for_form(self, form_id: uuid.UUID) -> List[LeadSubmission]:
        return await self.list(filters={"form_id": form_id})

    async def recent_for_forms(self, form_ids: List[uuid.UUID], limit: int = 20) -> List[LeadSubmission]:
        if not form_ids:
            return []
        query = (
            select(LeadSubmission)
            .where(LeadSubmission.form_id.in_(form_ids))
            .order_by(LeadSubmission.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def count_for_forms(self, form_ids: List[uuid.UUID], since: Optional[datetime] = None) -> int:
        if not form_ids:
            return 0
        query = select(func.count()).select_from(LeadSubmission).where(LeadSubmission.form_id.in_(form_ids))
        if since:
            query = query.where(LeadSubmission.created_at >= since)
        result = await self.session.exec(query)
        return result.one()

    async def mark_exported(self, form_id: uuid.UUID) -> None:
        await self.session.execute(
            update(LeadSubmission)
            .where(LeadSubmission.form_id == form_id)
            .values(is_exported=True)
        )
        await self.session.commit()


class LeadFormViewRepository(BaseRepository[LeadFormView]):
    """Repository for LeadFormView operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadFormView, session)

    async def count_for_forms(self, form_ids: List[uuid.UUID], since: Optional[datetime] = None) -> int:
        if not form_ids:
            return 0
        query = select(func.count()).select_from(LeadFormView).where(LeadFormView.form_id.in_(form_ids))
        if since:
            query = query.where(LeadFormView.created_at >= since)
        result = await self.session.exec(query)
        return result.one()


class GatedContentRepository(BaseRepository[GatedContent]):
    """Repository for GatedContent operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(GatedContent, session)

    async def get_by_slug(self, forum_id: uuid.UUID, slug: str) -> Optional[GatedContent]:
        query = select(GatedContent).where(
            GatedContent.forum_id == forum_id,
            GatedContent.slug == slug
        )
        result = await self.session.exec(query)
        return result.first()

    async def list_for_forum(self, forum_id: uuid.UUID, active_only: bool = False) -> List[GatedContent]:
        filters = {"forum_id": forum_id}
        if active_only:
            filters["is_active"] = True
        return await self.list(filters=filters)

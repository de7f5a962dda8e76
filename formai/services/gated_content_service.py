"""
Gated content service - teasers, owner management and unlocking.
"""
import uuid
import logging
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from formai.core.exceptions import raise_not_found, raise_bad_request, raise_already_exists
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.lead_repo import GatedContentRepository, LeadFormRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.gated import GatedContent
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.gated import GatedContentCreate, GatedContentUpdate
from formai.services.lead_service import LeadService, extract_contact

logger = logging.getLogger(__name__)


class GatedContentService:
    """Service for gated content operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.forum_repo = ForumRepository(session)
        self.form_repo = LeadFormRepository(session)
        self.content_repo = GatedContentRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def _owned(self, org_id: uuid.UUID, content_id: uuid.UUID) -> GatedContent:
        content = await self.content_repo.get(content_id)
        if content:
            forum = await self.forum_repo.get(content.forum_id)
            if forum and forum.org_id == org_id:
                return content
        raise_not_found("Gated content", str(content_id))

    async def _check_form(self, forum_id: uuid.UUID, form_id: Optional[uuid.UUID]) -> None:
        if not form_id:
            return
        form = await self.form_repo.get(form_id)
        if not form or form.forum_id != forum_id:
            raise_bad_request("Lead form must belong to the same forum")

    # Public

    async def list_public(self, forum_id: uuid.UUID) -> List[GatedContent]:
        """Active items of a public forum; callers expose teaser fields only."""
        forum = await self.forum_repo.get(forum_id)
        if not forum or not forum.is_public:
            raise_not_found("Forum", str(forum_id))
        return await self.content_repo.list_for_forum(forum.id, active_only=True)

    async def get_public(self, content_id: uuid.UUID) -> GatedContent:
        content = await self.content_repo.get(content_id)
        if not content or not content.is_active:
            raise_not_found("Gated content", str(content_id))
        return content

    async def unlock(
        self,
        content_id: uuid.UUID,
        form_data: dict,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> dict:
        """
        Exchange lead details for the full content.

        With a form attached the data is stored as a submission on it; without
        one only a valid email is required.
        """
        content = await self.get_public(content_id)

        submission_id = None
        if content.form_id:
            submission = await LeadService(self.session).submit(
                content.form_id, form_data, ip_address=ip_address, user_agent=user_agent
            )
            submission_id = submission.id
        else:
            extract_contact(form_data)

        forum = await self.forum_repo.get(content.forum_id)
        if forum:
            await self.activity_repo.log(
                org_id=forum.org_id,
                action=Actions.GATED_CONTENT_UNLOCKED,
                entity_type="gated_content",
                entity_id=content.id,
                ip_address=ip_address,
                user_agent=user_agent
            )
        return {"success": True, "submission_id": submission_id, "content": content}

    # Owner

    async def list(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> List[GatedContent]:
        forum = await self.forum_repo.get_owned(forum_id, org_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))
        return await self.content_repo.list_for_forum(forum.id)

    async def get(self, org_id: uuid.UUID, content_id: uuid.UUID) -> GatedContent:
        return await self._owned(org_id, content_id)

    async def create(self, user: User, content_data: GatedContentCreate) -> GatedContent:
        forum = await self.forum_repo.get(content_data.forum_id)
        if not forum or forum.org_id != user.current_org_id:
            raise_not_found("Forum", str(content_data.forum_id))
        await self._check_form(forum.id, content_data.form_id)
        if await self.content_repo.get_by_slug(forum.id, content_data.slug):
            raise_already_exists("Gated content", "slug", content_data.slug)

        content = await self.content_repo.create(content_data.model_dump())
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.GATED_CONTENT_CREATED,
            entity_type="gated_content",
            entity_id=content.id,
            description=f"Gated content '{content.title}' created"
        )
        return content

    async def update(self, user: User, content_id: uuid.UUID, content_data: GatedContentUpdate) -> GatedContent:
        content = await self._owned(user.current_org_id, content_id)
        update_data = content_data.model_dump(exclude_unset=True)

        await self._check_form(content.forum_id, update_data.get("form_id"))
        new_slug = update_data.get("slug")
        if new_slug and new_slug != content.slug and await self.content_repo.get_by_slug(content.forum_id, new_slug):
            raise_already_exists("Gated content", "slug", new_slug)

        content = await self.content_repo.update(content.id, update_data)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.GATED_CONTENT_UPDATED,
            entity_type="gated_content",
            entity_id=content.id,
            meta_data={"fields": sorted(update_data)}
        )
        return content

    async def delete(self, user: User, content_id: uuid.UUID) -> None:
        content = await self._owned(user.current_org_id, content_id)
        await self.content_repo.delete(content.id)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.GATED_CONTENT_DELETED,
            entity_type="gated_content",
            entity_id=content_id
        )

"""
Forum service - forums, categories, domains and embed keys.
"""
import uuid
import logging
from datetime import datetime
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func, update

from formai.core.exceptions import raise_not_found, raise_bad_request, raise_already_exists
from formai.core.security import api_keys_match, generate_api_key, generate_verification_token
from formai.core.text import slugify
from formai.repositories.forum_repo import ForumRepository, CategoryRepository, DomainVerificationRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.forum import Forum, Category, DomainVerification
from formai.models.question import Question, Answer
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.forum import ForumCreate, ForumUpdate, ForumDomainUpdate, CategoryCreate

logger = logging.getLogger(__name__)

VERIFICATION_RECORD_PREFIX = "_formai-verification"


class ForumService:
    """Service for forum operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.forum_repo = ForumRepository(session)
        self.category_repo = CategoryRepository(session)
        self.verification_repo = DomainVerificationRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def _unique_slug(self, base: str) -> str:
        slug = base or "forum"
        if not await self.forum_repo.get_by_slug(slug):
            return slug
        return f"{slug}-{uuid.uuid4().hex[:6]}"

    async def create(self, user: User, forum_data: ForumCreate) -> Forum:
        """Create a forum owned by the user's current organization."""
        data = forum_data.model_dump()
        if data.get("slug"):
            if await self.forum_repo.get_by_slug(data["slug"]):
                raise_already_exists("Forum", "slug", data["slug"])
        else:
            data["slug"] = await self._unique_slug(slugify(forum_data.name))

        data["org_id"] = user.current_org_id
        data["owner_id"] = user.id
        data["api_key"] = generate_api_key()
        forum = await self.forum_repo.create(data)

        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.FORUM_CREATED,
            entity_type="forum",
            entity_id=forum.id,
            description=f"Forum '{forum.name}' created",
            meta_data={"slug": forum.slug}
        )
        return forum

    async def get(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> Forum:
        """Get a forum of the organization."""
        forum = await self.forum_repo.get_owned(forum_id, org_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))
        return forum

    async def list_with_totals(self, org_id: uuid.UUID) -> List[dict]:
        """Forums of the organization with question and answer totals."""
        forums = await self.forum_repo.list_for_org(org_id)
        items = []
        for forum in forums:
            totals = await self.forum_repo.content_totals(forum.id)
            items.append({**forum.model_dump(), **totals})
        return items

    async def get_public(self, field: str, value: str) -> Forum:
        """Public lookup by slug, subdomain or custom domain."""
        if field == "subdomain":
            forum = await self.forum_repo.get_by_subdomain(value)
        elif field == "custom_domain":
            forum = await self.forum_repo.get_by_custom_domain(value)
        else:
            forum = await self.forum_repo.get_by_slug(value)
        if not forum or not forum.is_public:
            raise_not_found("Forum")
        return forum

    async def update(self, user: User, forum_id: uuid.UUID, forum_data: ForumUpdate) -> Forum:
        """Update forum settings."""
        forum = await self.get(user.current_org_id, forum_id)
        update_data = forum_data.model_dump(exclude_unset=True)

        new_slug = update_data.get("slug")
        if new_slug and new_slug != forum.slug and await self.forum_repo.get_by_slug(new_slug):
            raise_already_exists("Forum", "slug", new_slug)

        forum = await self.forum_repo.update(forum.id, update_data)
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.FORUM_UPDATED,
            entity_type="forum",
            entity_id=forum.id,
            meta_data={"fields": sorted(update_data)}
        )
        return forum

    async def delete(self, user: User, forum_id: uuid.UUID) -> None:
        """Delete a forum and all of its content."""
        forum = await self.get(user.current_org_id, forum_id)
        name = forum.name
        await self.forum_repo.delete_cascade(forum)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.FORUM_DELETED,
            entity_type="forum",
            entity_id=forum_id,
            description=f"Forum '{name}' deleted"
        )

    async def update_domain(self, user: User, forum_id: uuid.UUID, domain_data: ForumDomainUpdate) -> Forum:
        """Set or clear the subdomain and custom domain. Both must be unused."""
        forum = await self.get(user.current_org_id, forum_id)
        changes = domain_data.model_dump(exclude_unset=True)

        subdomain = changes.get("subdomain")
        if subdomain:
            other = await self.forum_repo.get_by_subdomain(subdomain)
            if other and other.id != forum.id:
                raise_bad_request(f"Subdomain '{subdomain}' is already taken")

        custom_domain = changes.get("custom_domain")
        if custom_domain:
            other = await self.forum_repo.get_by_custom_domain(custom_domain)
            if other and other.id != forum.id:
                raise_bad_request(f"Domain '{custom_domain}' is already in use")

        # Explicit nulls clear the field
        for field, value in changes.items():
            setattr(forum, field, value)
        forum.updated_at = datetime.utcnow()
        forum = await self.forum_repo.save(forum)

        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.FORUM_DOMAIN_UPDATED,
            entity_type="forum",
            entity_id=forum.id,
            meta_data={"subdomain": forum.subdomain, "custom_domain": forum.custom_domain}
        )
        return forum

    async def rotate_api_key(self, user: User, forum_id: uuid.UUID) -> Forum:
        """Issue a new embed API key; the old key stops working immediately."""
        forum = await self.get(user.current_org_id, forum_id)
        forum.api_key = generate_api_key()
        forum.updated_at = datetime.utcnow()
        forum = await self.forum_repo.save(forum)
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.FORUM_API_KEY_ROTATED,
            entity_type="forum",
            entity_id=forum.id
        )
        logger.info(f"Rotated embed API key for forum {forum.id}")
        return forum

    async def stats(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> dict:
        """Content statistics for one forum."""
        forum = await self.get(org_id, forum_id)

        question_row = (await self.session.exec(
            select(func.count(Question.id), func.coalesce(func.sum(Question.views), 0))
            .where(Question.forum_id == forum.id)
        )).one()
        answered = (await self.session.exec(
            select(func.count(func.distinct(Answer.question_id)))
            .join(Question, Answer.question_id == Question.id)
            .where(Question.forum_id == forum.id)
        )).one()
        total_answers = (await self.session.exec(
            select(func.count(Answer.id))
            .join(Question, Answer.question_id == Question.id)
            .where(Question.forum_id == forum.id)
        )).one()
        ai_answers = (await self.session.exec(
            select(func.count(Answer.id))
            .join(Question, Answer.question_id == Question.id)
            .where(Question.forum_id == forum.id, Answer.is_ai_generated == True)
        )).one()
        categories = await self.category_repo.count(filters={"forum_id": forum.id})

        total_questions, total_views = question_row
        return {
            "forum_id": forum.id,
            "total_questions": total_questions,
            "total_answers": total_answers,
            "ai_answers": ai_answers,
            "total_views": int(total_views or 0),
            "categories": categories,
            "unanswered_questions": total_questions - answered,
        }

    # Domain verification

    def _verification_response(self, record: DomainVerification) -> dict:
        return {
            "domain": record.domain,
            "verification_token": record.verification_token,
            "is_verified": record.is_verified,
            "verified_at": record.verified_at,
            "record_type": "TXT",
            "record_name": f"{VERIFICATION_RECORD_PREFIX}.{record.domain}",
            "record_value": f"formai-verification={record.verification_token}",
        }

    async def start_domain_verification(self, user: User, forum_id: uuid.UUID, domain: str) -> dict:
        """Issue a verification token for a custom domain."""
        forum = await self.get(user.current_org_id, forum_id)

        owner = await self.forum_repo.get_by_custom_domain(domain)
        if owner and owner.id != forum.id:
            raise_bad_request(f"Domain '{domain}' is already in use")

        record = await self.verification_repo.get_by_domain(domain)
        if record and record.forum_id != forum.id and record.is_verified:
            raise_bad_request(f"Domain '{domain}' is already verified by another forum")

        token = generate_verification_token()
        if record:
            record.forum_id = forum.id
            record.verification_token = token
            record.is_verified = False
            record.verified_at = None
            record = await self.verification_repo.save(record)
        else:
            record = await self.verification_repo.create({
                "forum_id": forum.id,
                "domain": domain,
                "verification_token": token,
            })
        return self._verification_response(record)

    async def check_domain_verification(self, user: User, forum_id: uuid.UUID, domain: str, token: str) -> dict:
        """Compare the token; on match mark the domain verified and attach it to the forum."""
        forum = await self.get(user.current_org_id, forum_id)
        record = await self.verification_repo.get_by_domain(domain)
        if not record or record.forum_id != forum.id:
            raise_not_found("Domain verification")

        if not api_keys_match(token, record.verification_token):
            raise_bad_request("Invalid verification token")

        owner = await self.forum_repo.get_by_custom_domain(domain)
        if owner and owner.id != forum.id:
            raise_bad_request(f"Domain '{domain}' is already in use")

        record.is_verified = True
        record.verified_at = datetime.utcnow()
        record = await self.verification_repo.save(record)

        forum.custom_domain = domain
        forum.updated_at = datetime.utcnow()
        await self.forum_repo.save(forum)

        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.FORUM_DOMAIN_VERIFIED,
            entity_type="forum",
            entity_id=forum.id,
            meta_data={"domain": domain}
        )
        logger.info(f"Verified custom domain {domain} for forum {forum.id}")
        return self._verification_response(record)

    # Categories

    async def list_categories(self, forum_id: uuid.UUID) -> List[Category]:
        forum = await self.forum_repo.get(forum_id)
        if not forum or not forum.is_public:
            raise_not_found("Forum", str(forum_id))
        return await self.category_repo.list_for_forum(forum.id)

    async def create_category(self, user: User, forum_id: uuid.UUID, category_data: CategoryCreate) -> Category:
        forum = await self.get(user.current_org_id, forum_id)
        slug = category_data.slug or slugify(category_data.name) or "category"
        if await self.category_repo.get_by_slug(forum.id, slug):
            raise_already_exists("Category", "slug", slug)
        return await self.category_repo.create({
            "forum_id": forum.id,
            "name": category_data.name,
            "slug": slug,
            "description": category_data.description,
        })

    async def delete_category(self, user: User, forum_id: uuid.UUID, category_id: uuid.UUID) -> None:
        forum = await self.get(user.current_org_id, forum_id)
        category = await self.category_repo.get(category_id)
        if not category or category.forum_id != forum.id:
            raise_not_found("Category", str(category_id))
        await self.session.execute(
            update(Question).where(Question.category_id == category.id).values(category_id=None)
        )
        await self.category_repo.delete(category.id)

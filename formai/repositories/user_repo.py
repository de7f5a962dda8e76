"""
Account repositories: users and their organization memberships.
"""
import uuid
from typing import Optional, Tuple
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.user import User, Organization, OrganizationMember, MemberRole
from formai.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Emails are stored lowercased, so lookups are case-insensitive."""
        return await self.get_by_field("email", email.strip().lower())

    async def create_with_org(
        self,
        email: str,
        password_hash: str,
        org_name: str,
        full_name: Optional[str] = None,
        display_name: Optional[str] = None
    ) -> Tuple[User, Organization, OrganizationMember]:
        """
        Sign-up in one transaction: the tenant, its first user and the
        owner membership that ties them together.
        """
        org = Organization(name=org_name.strip())
        self.session.add(org)
        await self.session.flush()

        user = User(
            email=email.strip().lower(),
            password_hash=password_hash,
            full_name=full_name,
            display_name=display_name,
            current_org_id=org.id,
        )
        self.session.add(user)
        await self.session.flush()

        owner = OrganizationMember(org_id=org.id, user_id=user.id, role=MemberRole.OWNER)
        self.session.add(owner)
        await self.session.commit()

        for obj in (org, user, owner):
            await self.session.refresh(obj)
        return user, org, owner

    async def update_last_login(self, user_id: uuid.UUID) -> None:
        user = await self.get(user_id)
        if user is None:
            return
        user.last_login_at = datetime.utcnow()
        await self.save(user)


class OrganizationMemberRepository(BaseRepository[OrganizationMember]):

    def __init__(self, session: AsyncSession):
        super().__init__(OrganizationMember, session)

    async def get_membership(self, user_id: uuid.UUID, org_id: uuid.UUID) -> Optional[OrganizationMember]:
        result = await self.session.exec(
            select(OrganizationMember)
            .where(OrganizationMember.user_id == user_id)
            .where(OrganizationMember.org_id == org_id)
        )
        return result.first()

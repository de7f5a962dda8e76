"""
Authentication service - registration, login and token lifecycle.
"""
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from formai.config import settings
from formai.core.security import (
    get_password_hash,
    verify_password,
    session_claims,
    issue_token_pair,
    create_access_token,
    verify_token,
    decode_token
)
from formai.core.exceptions import raise_already_exists, raise_unauthorized
from formai.repositories.user_repo import UserRepository, OrganizationMemberRepository
from formai.repositories.token_repo import RefreshTokenRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.user import User
from formai.models.activity import Actions

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TTL_SECONDS = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


class AuthService:
    """Dashboard accounts: sign-up, sessions and the current user."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.member_repo = OrganizationMemberRepository(session)
        self.refresh_token_repo = RefreshTokenRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def register(
        self,
        email: str,
        password: str,
        org_name: str,
        full_name: Optional[str] = None,
        display_name: Optional[str] = None
    ) -> dict:
        """Create the account and the organization it owns."""
        if await self.user_repo.get_by_email(email):
            raise_already_exists("User", "email", email)

        user, org, _ = await self.user_repo.create_with_org(
            email=email,
            password_hash=get_password_hash(password),
            org_name=org_name,
            full_name=full_name,
            display_name=display_name
        )
        await self.activity_repo.log(
            org_id=org.id,
            actor_id=user.id,
            action=Actions.USER_REGISTERED,
            entity_type="user",
            entity_id=user.id,
            description=f"{user.email} created {org.name}"
        )
        logger.info(f"Registered user {user.id} with organization {org.id}")

        return {
            "message": "User registered successfully",
            "user_id": str(user.id),
            "org_id": str(org.id)
        }

    async def login(
        self,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> dict:
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise_unauthorized("Incorrect email or password")
        if not user.is_active:
            raise_unauthorized("User account is deactivated")

        pair = issue_token_pair(session_claims(user.email, user.id, user.current_org_id))
        await self.refresh_token_repo.create_token(
            user_id=user.id,
            jti=pair.refresh_jti,
            token=pair.refresh_token,
            user_agent=user_agent,
            ip_address=ip_address
        )
        await self.user_repo.update_last_login(user.id)

        if user.current_org_id:
            await self.activity_repo.log(
                org_id=user.current_org_id,
                actor_id=user.id,
                action=Actions.USER_LOGGED_IN,
                entity_type="user",
                entity_id=user.id,
                ip_address=ip_address,
                user_agent=user_agent
            )

        return {
            "access_token": pair.access_token,
            "refresh_token": pair.refresh_token,
            "token_type": "bearer",
            "expires_in": ACCESS_TOKEN_TTL_SECONDS
        }

    async def refresh_access_token(self, refresh_token: str) -> dict:
        """New access token for a refresh token that is still on record."""
        payload = verify_token(refresh_token, "refresh")
        if not payload:
            raise_unauthorized("Invalid or expired refresh token")
        if not await self.refresh_token_repo.is_valid(payload.get("jti")):
            raise_unauthorized("Refresh token has been revoked")

        claims = session_claims(payload.get("sub"), payload.get("user_id"), payload.get("org_id"))
        return {
            "access_token": create_access_token(claims),
            "token_type": "bearer",
            "expires_in": ACCESS_TOKEN_TTL_SECONDS
        }

    async def logout(self, refresh_token: str) -> bool:
        """Revoke the refresh token. False when it was unknown or already revoked."""
        payload = decode_token(refresh_token)
        if not payload:
            return False
        stored = await self.refresh_token_repo.get_by_jti(payload.get("jti"))
        if not stored or stored.revoked:
            return False
        await self.refresh_token_repo.revoke(stored)
        return True

    async def get_me(self, user: User) -> dict:
        role = None
        if user.current_org_id:
            membership = await self.member_repo.get_membership(user.id, user.current_org_id)
            role = membership.role if membership else None
        return {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "display_name": user.display_name,
            "avatar_url": user.avatar_url,
            "current_org_id": user.current_org_id,
            "role": role,
            "created_at": user.created_at,
            "last_login_at": user.last_login_at
        }

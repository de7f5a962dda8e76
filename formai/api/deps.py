"""
API dependencies - shared across all routes.
"""
import uuid
from typing import Optional

from fastapi import Depends, Header, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.config import settings
from formai.core.security import verify_token
from formai.core.exceptions import raise_unauthorized
from formai.models.forum import Forum
from formai.models.user import User
from formai.repositories.user_repo import UserRepository
from formai.services.ai_service import AIContentService, ai_service
from formai.services.embed_service import EmbedService


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)


async def _user_from_token(token: str, session: AsyncSession) -> Optional[User]:
    payload = verify_token(token, "access")
    if not payload or not payload.get("user_id"):
        return None

    try:
        user_id = uuid.UUID(payload["user_id"])
    except ValueError:
        return None

    user = await UserRepository(session).get(user_id)
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from JWT token."""
    user = await _user_from_token(token, session)
    if not user:
        raise_unauthorized("Could not validate credentials")
    return user


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> Optional[User]:
    """Authenticated user when a valid token is sent, else None."""
    if not token:
        return None
    return await _user_from_token(token, session)


def get_ai_service() -> AIContentService:
    """The shared AI client; tests override this dependency."""
    return ai_service


def get_client_info(request: Request) -> dict:
    """Extract client info from request."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent")
    }


async def get_embed_forum(
    forum_id: uuid.UUID = Query(alias="forumId"),
    x_api_key: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session)
) -> Forum:
    """Forum for a widget read; private forums need their API key."""
    return await EmbedService(session).resolve_forum(forum_id, x_api_key)


async def get_embed_forum_for_write(
    forum_id: uuid.UUID = Query(alias="forumId"),
    x_api_key: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session)
) -> Forum:
    """Forum for a widget write; the API key is always required."""
    return await EmbedService(session).resolve_forum(forum_id, x_api_key, write=True)

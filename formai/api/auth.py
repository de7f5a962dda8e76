"""
Dashboard authentication: sign-up, login, token refresh and logout.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.auth_service import AuthService
from formai.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    RefreshRequest,
    AccessTokenResponse,
    CurrentUserResponse,
)
from formai.schemas.common import MessageResponse
from formai.api.deps import get_current_user, get_client_info
from formai.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Create an account together with its organization."""
    return await AuthService(session).register(**body.model_dump())


@router.post("/login", response_model=TokenResponse)
async def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session)
):
    """OAuth2 password flow; ``username`` carries the email."""
    return await AuthService(session).login(
        email=form_data.username,
        password=form_data.password,
        **get_client_info(request)
    )


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(body: RefreshRequest, session: AsyncSession = Depends(get_session)):
    return await AuthService(session).refresh_access_token(body.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(body: RefreshRequest, session: AsyncSession = Depends(get_session)):
    # Unknown tokens are accepted so logout never leaks which tokens exist
    await AuthService(session).logout(body.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=CurrentUserResponse)
async def me(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await AuthService(session).get_me(current_user)

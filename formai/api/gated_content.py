"""
Gated content API routes.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.gated_content_service import GatedContentService
from formai.schemas.gated import (
    GatedContentCreate, GatedContentUpdate, GatedContentTeaser, GatedContentResponse,
    UnlockRequest, UnlockResponse
)
from formai.api.deps import get_current_user, get_client_info
from formai.models.user import User

router = APIRouter(prefix="/api/gated-content", tags=["gated-content"])


@router.get("/public/{forum_id}", response_model=List[GatedContentTeaser])
async def list_public_content(
    forum_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    """Teasers of the active items of a public forum."""
    gated_service = GatedContentService(session)
    return await gated_service.list_public(forum_id)


@router.get("/public/item/{content_id}", response_model=GatedContentTeaser)
async def get_public_content(
    content_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    gated_service = GatedContentService(session)
    return await gated_service.get_public(content_id)


@router.post("/{content_id}/unlock", response_model=UnlockResponse)
async def unlock_content(
    content_id: uuid.UUID,
    unlock_data: UnlockRequest,
    client_info: dict = Depends(get_client_info),
    session: AsyncSession = Depends(get_session)
):
    """Public endpoint: trade lead details for the full content."""
    gated_service = GatedContentService(session)
    return await gated_service.unlock(content_id, unlock_data.form_data, **client_info)


@router.get("/", response_model=List[GatedContentResponse])
async def list_content(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    gated_service = GatedContentService(session)
    return await gated_service.list(current_user.current_org_id, forum_id)


@router.post("/", response_model=GatedContentResponse, status_code=201)
async def create_content(
    content_data: GatedContentCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    gated_service = GatedContentService(session)
    return await gated_service.create(current_user, content_data)


@router.get("/{content_id}", response_model=GatedContentResponse)
async def get_content(
    content_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    gated_service = GatedContentService(session)
    return await gated_service.get(current_user.current_org_id, content_id)


@router.patch("/{content_id}", response_model=GatedContentResponse)
async def update_content(
    content_id: uuid.UUID,
    content_data: GatedContentUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    gated_service = GatedContentService(session)
    return await gated_service.update(current_user, content_id, content_data)


@router.delete("/{content_id}", status_code=204)
async def delete_content(
    content_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    gated_service = GatedContentService(session)
    await gated_service.delete(current_user, content_id)

"""
Interlinking API routes - main-site pages and content links.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.interlink_service import InterlinkService
from formai.services.ai_service import AIContentService
from formai.schemas.interlink import (
    ContentType, MainSitePageCreate, MainSitePageUpdate, MainSitePageResponse,
    InterlinkCreate, InterlinkResponse, RelevantContent
)
from formai.api.deps import get_current_user, get_ai_service
from formai.models.user import User

router = APIRouter(prefix="/api/interlinks", tags=["interlinks"])


# Main site pages

@router.get("/pages", response_model=List[MainSitePageResponse])
async def list_pages(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.list_pages(current_user.current_org_id)


@router.post("/pages", response_model=MainSitePageResponse, status_code=201)
async def create_page(
    page_data: MainSitePageCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.create_page(current_user.current_org_id, page_data)


@router.get("/pages/by-slug/{slug}", response_model=MainSitePageResponse)
async def get_page_by_slug(
    slug: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.get_page_by_slug(current_user.current_org_id, slug)


@router.get("/pages/{page_id}", response_model=MainSitePageResponse)
async def get_page(
    page_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.get_page(current_user.current_org_id, page_id)


@router.patch("/pages/{page_id}", response_model=MainSitePageResponse)
async def update_page(
    page_id: uuid.UUID,
    page_data: MainSitePageUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.update_page(current_user.current_org_id, page_id, page_data)


@router.delete("/pages/{page_id}", status_code=204)
async def delete_page(
    page_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a page together with the links pointing to or from it."""
    interlink_service = InterlinkService(session)
    await interlink_service.delete_page(current_user.current_org_id, page_id)


# Links

@router.post("/", response_model=InterlinkResponse, status_code=201)
async def create_interlink(
    link_data: InterlinkCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.create_link(current_user, link_data)


@router.get("/source/{source_type}/{source_id}", response_model=List[InterlinkResponse])
async def list_by_source(
    source_type: ContentType,
    source_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.list_by_source(current_user.current_org_id, source_type, source_id)


@router.get("/target/{target_type}/{target_id}", response_model=List[InterlinkResponse])
async def list_by_target(
    target_type: ContentType,
    target_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.list_by_target(current_user.current_org_id, target_type, target_id)


@router.get("/forum/{forum_id}", response_model=List[InterlinkResponse])
async def list_for_forum(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.list_for_forum(current_user.current_org_id, forum_id)


@router.get("/relevant/{content_type}/{content_id}", response_model=List[RelevantContent])
async def relevant_content(
    content_type: ContentType,
    content_id: uuid.UUID,
    limit: int = Query(default=5, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Link candidates ranked by keyword overlap."""
    interlink_service = InterlinkService(session)
    return await interlink_service.relevant_content(current_user.current_org_id, content_type, content_id, limit)


@router.get("/suggestions")
async def ai_suggestions(
    content_type: ContentType,
    content_id: uuid.UUID,
    limit: int = Query(default=5, ge=1, le=20),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Links proposed by the AI provider, with anchor text."""
    interlink_service = InterlinkService(session, ai=ai)
    suggestions = await interlink_service.ai_suggestions(
        current_user.current_org_id, content_type, content_id, limit
    )
    return {"suggestions": suggestions}


@router.get("/stats")
async def interlink_stats(
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    return await interlink_service.stats(current_user.current_org_id, forum_id)


@router.delete("/{link_id}", status_code=204)
async def delete_interlink(
    link_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    interlink_service = InterlinkService(session)
    await interlink_service.delete_link(current_user.current_org_id, link_id)

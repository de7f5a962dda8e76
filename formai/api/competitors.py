"""
Competitor API routes.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.competitor_service import CompetitorService
from formai.services.ai_service import AIContentService
from formai.schemas.seo import CompetitorCreate, CompetitorUpdate, CompetitorResponse
from formai.api.deps import get_current_user, get_ai_service
from formai.models.user import User

router = APIRouter(prefix="/api/competitors", tags=["competitors"])


@router.get("/", response_model=List[CompetitorResponse])
async def list_competitors(
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    competitor_service = CompetitorService(session)
    return await competitor_service.list(current_user.current_org_id, forum_id)


@router.post("/", response_model=CompetitorResponse, status_code=201)
async def create_competitor(
    competitor_data: CompetitorCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    competitor_service = CompetitorService(session)
    return await competitor_service.create(current_user.current_org_id, competitor_data)


@router.get("/keyword-gaps")
async def keyword_gaps(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Competitor keywords the forum does not track yet."""
    competitor_service = CompetitorService(session)
    return {"gaps": await competitor_service.keyword_gaps(current_user.current_org_id, forum_id)}


@router.get("/{competitor_id}", response_model=CompetitorResponse)
async def get_competitor(
    competitor_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    competitor_service = CompetitorService(session)
    return await competitor_service.get(current_user.current_org_id, competitor_id)


@router.patch("/{competitor_id}", response_model=CompetitorResponse)
async def update_competitor(
    competitor_id: uuid.UUID,
    competitor_data: CompetitorUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    competitor_service = CompetitorService(session)
    return await competitor_service.update(current_user.current_org_id, competitor_id, competitor_data)


@router.delete("/{competitor_id}", status_code=204)
async def delete_competitor(
    competitor_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    competitor_service = CompetitorService(session)
    await competitor_service.delete(current_user.current_org_id, competitor_id)


@router.post("/{competitor_id}/analyze", response_model=CompetitorResponse)
async def analyze_competitor(
    competitor_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Run the AI analysis and store it on the competitor."""
    competitor_service = CompetitorService(session, ai=ai)
    return await competitor_service.analyze(current_user, competitor_id)

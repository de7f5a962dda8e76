"""
Tracked keyword API routes.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.keyword_service import KeywordService
from formai.schemas.seo import (
    TrackedKeywordCreate, TrackedKeywordUpdate, TrackedKeywordResponse,
    RankingCreate, RankingResponse, KeywordDetail
)
from formai.api.deps import get_current_user
from formai.models.user import User

router = APIRouter(prefix="/api/keywords", tags=["keywords"])


@router.get("/", response_model=List[TrackedKeywordResponse])
async def list_keywords(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Tracked keywords of a forum with their latest position."""
    keyword_service = KeywordService(session)
    return await keyword_service.list(current_user.current_org_id, forum_id)


@router.post("/", response_model=TrackedKeywordResponse, status_code=201)
async def create_keyword(
    forum_id: uuid.UUID,
    keyword_data: TrackedKeywordCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    keyword_service = KeywordService(session)
    return await keyword_service.create(current_user.current_org_id, forum_id, keyword_data)


@router.get("/{keyword_id}", response_model=KeywordDetail)
async def get_keyword(
    keyword_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Keyword with its ranking history."""
    keyword_service = KeywordService(session)
    return await keyword_service.detail(current_user.current_org_id, keyword_id)


@router.patch("/{keyword_id}", response_model=TrackedKeywordResponse)
async def update_keyword(
    keyword_id: uuid.UUID,
    keyword_data: TrackedKeywordUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    keyword_service = KeywordService(session)
    return await keyword_service.update(current_user.current_org_id, keyword_id, keyword_data)


@router.delete("/{keyword_id}", status_code=204)
async def delete_keyword(
    keyword_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    keyword_service = KeywordService(session)
    await keyword_service.delete(current_user.current_org_id, keyword_id)


@router.post("/{keyword_id}/rankings", response_model=RankingResponse, status_code=201)
async def record_ranking(
    keyword_id: uuid.UUID,
    ranking_data: RankingCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Record a search position; change is measured against the previous one."""
    keyword_service = KeywordService(session)
    return await keyword_service.record_ranking(current_user.current_org_id, keyword_id, ranking_data)

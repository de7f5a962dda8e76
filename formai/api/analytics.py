"""
Analytics API routes.
"""
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.analytics_service import AnalyticsService
from formai.schemas.analytics import TrackEventRequest
from formai.schemas.common import MessageResponse
from formai.api.deps import get_current_user, get_optional_user, get_client_info
from formai.models.user import User

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

Period = Literal["7d", "30d", "90d"]


@router.post("/track-event", response_model=MessageResponse, status_code=201)
async def track_event(
    event: TrackEventRequest,
    client_info: dict = Depends(get_client_info),
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    """Public endpoint used by forum pages and widgets."""
    analytics_service = AnalyticsService(session)
    await analytics_service.track_event(
        event,
        user_agent=client_info["user_agent"],
        user_id=current_user.id if current_user else None
    )
    return MessageResponse(message="Event tracked")


@router.get("/dashboard")
async def dashboard(
    period: Period = "30d",
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Headline numbers for the period."""
    analytics_service = AnalyticsService(session)
    return await analytics_service.dashboard(current_user.current_org_id, period, forum_id)


@router.get("/traffic")
async def traffic(
    period: Period = "30d",
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    analytics_service = AnalyticsService(session)
    return {"series": await analytics_service.traffic(current_user.current_org_id, period, forum_id)}


@router.get("/top-content")
async def top_content(
    forum_id: Optional[uuid.UUID] = None,
    limit: int = Query(default=10, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    analytics_service = AnalyticsService(session)
    return {"content": await analytics_service.top_content(current_user.current_org_id, forum_id, limit)}


@router.get("/events")
async def event_counts(
    period: Period = "30d",
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Event totals by type."""
    analytics_service = AnalyticsService(session)
    return {"events": await analytics_service.event_counts(current_user.current_org_id, period, forum_id)}


@router.get("/audience")
async def audience(
    period: Period = "30d",
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    analytics_service = AnalyticsService(session)
    return await analytics_service.audience(current_user.current_org_id, period, forum_id)


@router.get("/leads")
async def lead_stats(
    period: Period = "30d",
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Per-form views, submissions and conversion rate."""
    analytics_service = AnalyticsService(session)
    return {"forms": await analytics_service.lead_stats(current_user.current_org_id, period, forum_id)}


@router.get("/ai-activity")
async def ai_activity(
    period: Period = "30d",
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    analytics_service = AnalyticsService(session)
    return {"series": await analytics_service.ai_activity(current_user.current_org_id, period, forum_id)}


@router.get("/realtime")
async def realtime(
    minutes: int = Query(default=5, ge=1, le=60),
    forum_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    analytics_service = AnalyticsService(session)
    return await analytics_service.realtime(current_user.current_org_id, minutes, forum_id)

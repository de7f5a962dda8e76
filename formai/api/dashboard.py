"""
Dashboard API routes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel import select
from datetime import datetime, timedelta

from formai.database import get_session
from formai.core.pagination import PaginationParams, pagination_params
from formai.services.activity_service import ActivityService
from formai.services.analytics_service import daily_series
from formai.services.lead_service import conversion_rate
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.persona_repo import AIPersonaRepository
from formai.repositories.lead_repo import LeadFormRepository, LeadSubmissionRepository, LeadFormViewRepository
from formai.api.deps import get_current_user
from formai.models.user import User
from formai.models.question import Question

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get dashboard statistics."""
    org_id = current_user.current_org_id

    # Forum content
    forum_repo = ForumRepository(session)
    forum_ids = await forum_repo.list_ids_for_org(org_id)
    questions = answers = 0
    for forum_id in forum_ids:
        totals = await forum_repo.content_totals(forum_id)
        questions += totals["question_count"]
        answers += totals["answer_count"]

    # Personas
    persona_repo = AIPersonaRepository(session)
    personas = await persona_repo.count(org_id)

    # Lead capture
    forms = await LeadFormRepository(session).list_for_forums(forum_ids)
    form_ids = [f.id for f in forms]
    views = await LeadFormViewRepository(session).count_for_forms(form_ids)
    submissions = await LeadSubmissionRepository(session).count_for_forms(form_ids)

    return {
        "total_forums": len(forum_ids),
        "total_questions": questions,
        "total_answers": answers,
        "total_personas": personas,
        "lead_forms": len(forms),
        "lead_submissions": submissions,
        "conversion_rate": conversion_rate(views, submissions),
    }


@router.get("/activity")
async def get_activity(
    entity_type: Optional[str] = None,
    pagination: PaginationParams = Depends(pagination_params),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get recent activity, newest first."""
    activity_service = ActivityService(session)
    return await activity_service.list_activity(
        current_user.current_org_id,
        page=pagination.page,
        limit=pagination.limit,
        entity_type=entity_type
    )


@router.get("/chart")
async def get_chart_data(
    days: int = Query(7, ge=1, le=30),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Questions created per day."""
    forum_ids = await ForumRepository(session).list_ids_for_org(current_user.current_org_id)
    start_date = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days - 1)

    timestamps = []
    if forum_ids:
        result = await session.exec(
            select(Question.created_at).where(
                Question.forum_id.in_(forum_ids),
                Question.created_at >= start_date
            )
        )
        timestamps = list(result.all())

    series = daily_series(timestamps, days)
    data = [point["count"] for point in series]
    return {
        "labels": [datetime.fromisoformat(point["date"]).strftime("%a") for point in series],
        "data": data,
        "total": sum(data)
    }

"""
Analytics service - event tracking and dashboard aggregates.
"""
import uuid
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional, List, Dict

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from formai.core.exceptions import raise_not_found
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.analytics_repo import AnalyticsEventRepository
from formai.repositories.lead_repo import LeadFormRepository, LeadSubmissionRepository, LeadFormViewRepository
from formai.models.analytics import AnalyticsEvent
from formai.models.question import Question, Answer
from formai.schemas.analytics import TrackEventRequest
from formai.services.lead_service import conversion_rate

logger = logging.getLogger(__name__)

PERIODS = {"7d": 7, "30d": 30, "90d": 90}
PAGE_VIEW = "page_view"


def daily_series(timestamps: List[datetime], days: int, now: Optional[datetime] = None) -> List[dict]:
    """Counts per calendar day for the last `days` days, including days with none."""
    today = (now or datetime.utcnow()).date()
    counts = Counter(ts.date() for ts in timestamps)
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append({"date": day.isoformat(), "count": counts.get(day, 0)})
    return series


class AnalyticsService:
    """Service for analytics operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.forum_repo = ForumRepository(session)
        self.event_repo = AnalyticsEventRepository(session)
        self.form_repo = LeadFormRepository(session)
        self.submission_repo = LeadSubmissionRepository(session)
        self.view_repo = LeadFormViewRepository(session)

    async def track_event(
        self,
        event: TrackEventRequest,
        user_agent: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None
    ) -> AnalyticsEvent:
        """Store a tracked event for an existing forum."""
        forum = await self.forum_repo.get(event.forum_id)
        if not forum:
            raise_not_found("Forum", str(event.forum_id))

        data = event.model_dump()
        data["user_id"] = user_id
        if not data.get("device_type") and user_agent:
            data["device_type"] = self._device_from_user_agent(user_agent)
        return await self.event_repo.create(data)

    def _device_from_user_agent(self, user_agent: str) -> str:
        ua = user_agent.lower()
        if "ipad" in ua or "tablet" in ua:
            return "tablet"
        if "mobile" in ua or "android" in ua or "iphone" in ua:
            return "mobile"
        return "desktop"

    async def _forum_ids(self, org_id: uuid.UUID, forum_id: Optional[uuid.UUID] = None) -> List[uuid.UUID]:
        if forum_id:
            forum = await self.forum_repo.get_owned(forum_id, org_id)
            if not forum:
                raise_not_found("Forum", str(forum_id))
            return [forum.id]
        return await self.forum_repo.list_ids_for_org(org_id)

    def _since(self, period: str) -> datetime:
        return datetime.utcnow() - timedelta(days=PERIODS.get(period, 30))

    async def _count_questions(self, forum_ids: List[uuid.UUID], since: datetime, ai_only: bool = False) -> int:
        if not forum_ids:
            return 0
        query = select(func.count(Question.id)).where(
            Question.forum_id.in_(forum_ids), Question.created_at >= since
        )
        if ai_only:
            query = query.where(Question.is_ai_generated == True)
        return (await self.session.exec(query)).one()

    async def _count_answers(self, forum_ids: List[uuid.UUID], since: datetime, ai_only: bool = False) -> int:
        if not forum_ids:
            return 0
        query = (
            select(func.count(Answer.id))
            .join(Question, Answer.question_id == Question.id)
            .where(Question.forum_id.in_(forum_ids), Answer.created_at >= since)
        )
        if ai_only:
            query = query.where(Answer.is_ai_generated == True)
        return (await self.session.exec(query)).one()

    async def dashboard(self, org_id: uuid.UUID, period: str = "30d", forum_id: Optional[uuid.UUID] = None) -> dict:
        """Headline numbers for the period."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        since = self._since(period)

        forms = await self.form_repo.list_for_forums(forum_ids)
        form_ids = [f.id for f in forms]
        submissions = await self.submission_repo.count_for_forms(form_ids, since)
        form_views = await self.view_repo.count_for_forms(form_ids, since)

        return {
            "period": period,
            "questions": await self._count_questions(forum_ids, since),
            "answers": await self._count_answers(forum_ids, since),
            "ai_answers": await self._count_answers(forum_ids, since, ai_only=True),
            "page_views": await self.event_repo.count_events(forum_ids, since, PAGE_VIEW),
            "unique_sessions": await self.event_repo.count_sessions(forum_ids, since),
            "lead_submissions": submissions,
            "conversion_rate": conversion_rate(form_views, submissions),
        }

    async def traffic(self, org_id: uuid.UUID, period: str = "30d", forum_id: Optional[uuid.UUID] = None) -> List[dict]:
        """Daily page views for the period."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        days = PERIODS.get(period, 30)
        since = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days - 1)
        timestamps = await self.event_repo.timestamps(forum_ids, since, PAGE_VIEW)
        return daily_series(timestamps, days)

    async def top_content(self, org_id: uuid.UUID, forum_id: Optional[uuid.UUID] = None, limit: int = 10) -> List[dict]:
        """Most viewed questions."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        if not forum_ids:
            return []
        query = (
            select(Question)
            .where(Question.forum_id.in_(forum_ids))
            .order_by(Question.views.desc(), Question.created_at.desc())
            .limit(limit)
        )
        questions = (await self.session.exec(query)).all()
        return [
            {"question_id": q.id, "forum_id": q.forum_id, "title": q.title, "views": q.views}
            for q in questions
        ]

    async def event_counts(self, org_id: uuid.UUID, period: str = "30d", forum_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
        forum_ids = await self._forum_ids(org_id, forum_id)
        return await self.event_repo.count_by("event_type", forum_ids, self._since(period))

    async def audience(self, org_id: uuid.UUID, period: str = "30d", forum_id: Optional[uuid.UUID] = None) -> dict:
        """Device and referrer distribution."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        since = self._since(period)
        return {
            "devices": await self.event_repo.count_by("device_type", forum_ids, since),
            "referrers": await self.event_repo.count_by("referrer", forum_ids, since, limit=10),
        }

    async def lead_stats(self, org_id: uuid.UUID, period: str = "30d", forum_id: Optional[uuid.UUID] = None) -> List[dict]:
        """Views, submissions and conversion per lead form."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        since = self._since(period)
        rows = []
        for form in await self.form_repo.list_for_forums(forum_ids):
            views = await self.view_repo.count_for_forms([form.id], since)
            submissions = await self.submission_repo.count_for_forms([form.id], since)
            rows.append({
                "form_id": form.id,
                "name": form.name,
                "views": views,
                "submissions": submissions,
                "conversion_rate": conversion_rate(views, submissions),
            })
        return rows

    async def ai_activity(self, org_id: uuid.UUID, period: str = "30d", forum_id: Optional[uuid.UUID] = None) -> List[dict]:
        """AI-generated questions and answers per day."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        days = PERIODS.get(period, 30)
        since = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days - 1)

        question_times, answer_times = [], []
        if forum_ids:
            question_times = (await self.session.exec(
                select(Question.created_at).where(
                    Question.forum_id.in_(forum_ids),
                    Question.is_ai_generated == True,
                    Question.created_at >= since
                )
            )).all()
            answer_times = (await self.session.exec(
                select(Answer.created_at)
                .join(Question, Answer.question_id == Question.id)
                .where(
                    Question.forum_id.in_(forum_ids),
                    Answer.is_ai_generated == True,
                    Answer.created_at >= since
                )
            )).all()

        questions = daily_series(list(question_times), days)
        answers = daily_series(list(answer_times), days)
        return [
            {"date": q["date"], "questions": q["count"], "answers": a["count"]}
            for q, a in zip(questions, answers)
        ]

    async def realtime(self, org_id: uuid.UUID, minutes: int = 5, forum_id: Optional[uuid.UUID] = None) -> dict:
        """Snapshot of the last few minutes; clients poll this."""
        forum_ids = await self._forum_ids(org_id, forum_id)
        since = datetime.utcnow() - timedelta(minutes=minutes)
        recent = await self.event_repo.recent(forum_ids, since, limit=20)
        return {
            "minutes": minutes,
            "events": await self.event_repo.count_events(forum_ids, since),
            "active_sessions": await self.event_repo.count_sessions(forum_ids, since),
            "top_paths": await self.event_repo.count_by("path", forum_ids, since, PAGE_VIEW, limit=5),
            "recent_events": [
                {
                    "event_type": e.event_type,
                    "path": e.path,
                    "forum_id": e.forum_id,
                    "created_at": e.created_at,
                }
                for e in recent
            ],
            "timestamp": datetime.utcnow(),
        }

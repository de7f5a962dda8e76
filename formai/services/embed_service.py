"""
Embed service - public widget API for forums placed on third-party sites.

Responses use camelCase keys, which is what the browser widgets and the
client SDK read.
"""
import uuid
import logging
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from fastapi.concurrency import run_in_threadpool
from pydantic.alias_generators import to_camel
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.config import settings
from formai.core.exceptions import (
    raise_not_found,
    raise_unauthorized,
    raise_forbidden,
    ExternalServiceError,
)
from formai.core.security import api_keys_match
from formai.core.text import slugify
from formai.repositories.forum_repo import ForumRepository, CategoryRepository
from formai.repositories.question_repo import QuestionRepository, AnswerRepository, VoteRepository
from formai.repositories.persona_repo import AIPersonaRepository
from formai.repositories.analytics_repo import AnalyticsEventRepository
from formai.models.forum import Forum
from formai.models.question import Question
from formai.schemas.question import QuestionCreate
from formai.schemas.embed import EmbedQuestionCreate, EmbedAnswerCreate, AnswerPreviewRequest
from formai.services.ai_service import AIContentService, ai_service, FALLBACK_ANSWER
from formai.services.question_service import QuestionService, question_to_dict, answer_to_dict
from formai.services.lead_service import LeadService

logger = logging.getLogger(__name__)

EMBED_API_NAME = "FormAI Embed API"

# Query parameters consumed by the redirect endpoint itself
REDIRECT_PARAMS = {
    "dest", "id", "embed", "theme", "utm_source", "utm_medium", "utm_campaign", "track",
    "forumId", "api_key",
}


def camelize(data: dict) -> dict:
    return {to_camel(key): value for key, value in data.items()}


def embed_voter_key(forum: Forum) -> str:
    """Votes cast through the widget are keyed to the forum that carries it."""
    return f"embed:{forum.id}"


def forum_base_url(forum: Forum) -> str:
    if forum.custom_domain:
        return f"https://{forum.custom_domain}"
    if forum.subdomain:
        return f"https://{forum.subdomain}.{settings.BASE_DOMAIN}"
    return f"https://{settings.BASE_DOMAIN}/forum/{forum.slug}"


class EmbedService:
    """Service behind the embed API."""

    def __init__(self, session: AsyncSession, ai: AIContentService = None):
        self.session = session
        self.ai = ai or ai_service
        self.forum_repo = ForumRepository(session)
        self.category_repo = CategoryRepository(session)
        self.question_repo = QuestionRepository(session)
        self.answer_repo = AnswerRepository(session)
        self.vote_repo = VoteRepository(session)
        self.persona_repo = AIPersonaRepository(session)
        self.event_repo = AnalyticsEventRepository(session)
        self.questions = QuestionService(session, ai=self.ai)
        self.leads = LeadService(session)

    async def resolve_forum(self, forum_id: uuid.UUID, api_key: Optional[str] = None, write: bool = False) -> Forum:
        """
        Forum addressed by a widget request.

        Writes always need the forum's API key; reads need it only for
        private forums. A missing key is 401, a wrong one 403.
        """
        forum = await self.forum_repo.get(forum_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))
        if write or not forum.is_public:
            if not api_key:
                raise_unauthorized("API key required")
            if not api_keys_match(api_key, forum.api_key):
                raise_forbidden("Invalid API key")
        return forum

    async def _question_in_forum(self, forum: Forum, question_id: uuid.UUID) -> Question:
        question = await self.question_repo.get(question_id)
        if not question or question.forum_id != forum.id:
            raise_not_found("Question", str(question_id))
        return question

    # Reads

    def version(self) -> dict:
        return {
            "version": settings.EMBED_API_VERSION,
            "api": EMBED_API_NAME,
            "timestamp": datetime.utcnow().isoformat(),
        }

    async def forum_info(self, forum: Forum) -> dict:
        """Public forum fields with content totals; keys and owners are left out."""
        totals = await self.forum_repo.content_totals(forum.id)
        return {
            "id": forum.id,
            "name": forum.name,
            "description": forum.description,
            "slug": forum.slug,
            "subdomain": forum.subdomain,
            "customDomain": forum.custom_domain,
            "themeColor": forum.theme_color,
            "primaryFont": forum.primary_font,
            "totalQuestions": totals["question_count"],
            "totalAnswers": totals["answer_count"],
        }

    async def list_questions(
        self,
        forum: Forum,
        list_type: str = "recent",
        limit: int = 5,
        category_id: Optional[uuid.UUID] = None,
        sort_by: str = "views",
        time_frame: int = 30
    ) -> dict:
        rows = await self.question_repo.list_for_forum(
            forum.id,
            list_type=list_type,
            sort_by=sort_by,
            time_frame=time_frame,
            category_id=category_id,
            limit=limit
        )
        return {
            "questions": [camelize(question_to_dict(q, count)) for q, count in rows],
            "forumSlug": forum.slug,
        }

    async def list_categories(self, forum: Forum) -> dict:
        categories = await self.category_repo.list_for_forum(forum.id)
        return {"categories": [camelize(c.model_dump()) for c in categories]}

    async def get_question(self, forum: Forum, question_id: uuid.UUID) -> dict:
        question = await self._question_in_forum(forum, question_id)
        return camelize(await self.questions.detail(question))

    async def list_answers(self, forum: Forum, question_id: uuid.UUID, limit: int = 20, sort_by: str = "votes") -> dict:
        question = await self._question_in_forum(forum, question_id)
        rows = await self.answer_repo.list_for_question(question.id, sort_by=sort_by, limit=limit)
        return {"answers": [camelize(answer_to_dict(a, score)) for a, score in rows]}

    async def search(self, forum: Forum, term: str, limit: int = 20) -> dict:
        rows = await self.question_repo.search(forum.id, term.strip(), limit)
        return {"results": [camelize(question_to_dict(q, count)) for q, count in rows]}

    # Writes

    async def ask(self, forum: Forum, question_data: EmbedQuestionCreate) -> dict:
        question = await self.questions.create_anonymous(
            forum,
            QuestionCreate(
                title=question_data.title,
                content=question_data.content,
                category_id=question_data.category_id,
            ),
            author_name=question_data.author_name,
            source="embed",
        )
        return camelize(question_to_dict(question))

    async def answer(self, forum: Forum, question_id: uuid.UUID, answer_data: EmbedAnswerCreate) -> dict:
        question = await self._question_in_forum(forum, question_id)
        answer = await self.questions.create_anonymous_answer(
            forum, question, answer_data.content, author_name=answer_data.author_name
        )
        return camelize(answer_to_dict(answer))

    async def vote(self, forum: Forum, answer_id: uuid.UUID, is_upvote: bool) -> dict:
        answer = await self.answer_repo.get(answer_id)
        if not answer:
            raise_not_found("Answer", str(answer_id))
        await self._question_in_forum(forum, answer.question_id)

        vote = await self.vote_repo.upsert(answer.id, embed_voter_key(forum), is_upvote)
        return {
            "answerId": answer.id,
            "isUpvote": vote.is_upvote,
            "score": await self.vote_repo.score(answer.id),
        }

    async def answer_preview(self, forum: Forum, request: AnswerPreviewRequest) -> dict:
        """AI answer in the voice of the forum's persona of that type. Nothing is stored."""
        persona = await self.persona_repo.get_first_of_type(forum.org_id, request.persona_type)
        answer = await run_in_threadpool(
            self.ai.generate_answer,
            request.question_title,
            request.question_content,
            request.persona_type,
            persona,
        )
        if answer == FALLBACK_ANSWER:
            raise ExternalServiceError("AI provider", "could not generate an answer preview")
        return {
            "answer": answer,
            "personaType": request.persona_type,
            "personaName": persona.name if persona else None,
        }

    # Lead capture

    async def lead_form(
        self,
        forum: Forum,
        form_id: uuid.UUID,
        referrer: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> dict:
        """Form definition for rendering; fetching it counts as a view."""
        form = await self.leads.get_active_form(form_id, forum_id=forum.id)
        await self.leads.record_view(form.id, referrer, ip_address, user_agent, forum_id=forum.id)
        return camelize(form.model_dump())

    async def submit_lead(
        self,
        forum: Forum,
        form_id: uuid.UUID,
        form_data: dict,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> dict:
        submission = await self.leads.submit(
            form_id, form_data, ip_address=ip_address, user_agent=user_agent, forum_id=forum.id
        )
        form = await self.leads.form_repo.get(form_id)
        return camelize(self.leads.submission_result(form, submission))

    async def track_form_view(
        self,
        forum: Forum,
        form_id: uuid.UUID,
        referrer: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> dict:
        await self.leads.record_view(form_id, referrer, ip_address, user_agent, forum_id=forum.id)
        return {"success": True}

    # Redirects

    async def redirect_url(
        self,
        forum: Forum,
        dest: Optional[str] = None,
        target_id: Optional[uuid.UUID] = None,
        embed: Optional[str] = None,
        theme: Optional[str] = None,
        utm_source: str = "redirect",
        utm_medium: str = "forum",
        utm_campaign: str = "forum-redirect",
        track: bool = True,
        extra_params: Optional[dict] = None,
        referrer: Optional[str] = None
    ) -> str:
        """Hosted forum URL for a widget link, with UTM parameters when tracking."""
        path = ""
        if dest == "question":
            question = await self.question_repo.get(target_id) if target_id else None
            if question and question.forum_id == forum.id:
                path = f"/question/{question.id}/{slugify(question.title)}"
            else:
                path = "/questions"
        elif dest == "category":
            category = await self.category_repo.get(target_id) if target_id else None
            if category and category.forum_id == forum.id:
                path = f"/category/{category.id}/{slugify(category.name)}"
            else:
                path = "/categories"
        elif dest == "ask":
            path = "/ask"

        params = {}
        if embed:
            params["embed"] = embed
        if theme:
            params["theme"] = theme
        if track:
            params["utm_source"] = utm_source
            params["utm_medium"] = utm_medium
            params["utm_campaign"] = utm_campaign
        for key, value in (extra_params or {}).items():
            if key not in REDIRECT_PARAMS:
                params[key] = value

        if track:
            await self.event_repo.create({
                "forum_id": forum.id,
                "event_type": "redirect",
                "event_category": "forum_embed",
                "event_action": f"redirect_to_{dest or 'forum'}",
                "event_label": f"from={referrer or 'unknown'};to={path or '/'}",
                "event_value": 1,
                "referrer": referrer,
                "path": path or "/",
            })

        query = urlencode(params)
        return f"{forum_base_url(forum)}{path}{'?' + query if query else ''}"


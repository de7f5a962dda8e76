"""
Embed API routes - consumed by widgets on third-party sites and the client SDK.

Forums are addressed with the `forumId` query parameter and the forum's API
key travels in the `X-API-Key` header.
"""
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import RedirectResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.embed_service import EmbedService
from formai.services.ai_service import AIContentService
from formai.schemas.embed import (
    EmbedQuestionCreate, EmbedAnswerCreate, EmbedVoteRequest, AnswerPreviewRequest,
    EmbedLeadFormSubmit, TrackFormViewRequest
)
from formai.api.deps import get_embed_forum, get_embed_forum_for_write, get_ai_service, get_client_info
from formai.models.forum import Forum

router = APIRouter(prefix="/api/embed", tags=["embed"])


@router.get("/version")
async def version(session: AsyncSession = Depends(get_session)):
    return EmbedService(session).version()


@router.get("/forum/{forum_id}")
async def forum_info(
    forum_id: uuid.UUID,
    x_api_key: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session)
):
    embed_service = EmbedService(session)
    forum = await embed_service.resolve_forum(forum_id, x_api_key)
    return await embed_service.forum_info(forum)


@router.get("/questions")
async def list_questions(
    list_type: Literal["recent", "popular"] = Query(default="recent", alias="type"),
    limit: int = Query(default=5, ge=1, le=50),
    category_id: Optional[uuid.UUID] = Query(default=None, alias="categoryId"),
    sort_by: Literal["views", "answers"] = Query(default="views", alias="sortBy"),
    time_frame: int = Query(default=30, ge=0, le=365, alias="timeFrame"),
    forum: Forum = Depends(get_embed_forum),
    session: AsyncSession = Depends(get_session)
):
    embed_service = EmbedService(session)
    return await embed_service.list_questions(forum, list_type, limit, category_id, sort_by, time_frame)


@router.get("/categories")
async def list_categories(
    forum: Forum = Depends(get_embed_forum),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).list_categories(forum)


@router.get("/search")
async def search(
    q: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=50),
    forum: Forum = Depends(get_embed_forum),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).search(forum, q, limit)


@router.get("/questions/{question_id}")
async def get_question(
    question_id: uuid.UUID,
    forum: Forum = Depends(get_embed_forum),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).get_question(forum, question_id)


@router.get("/questions/{question_id}/answers")
async def list_answers(
    question_id: uuid.UUID,
    limit: int = Query(default=20, ge=1, le=100),
    sort_by: Literal["votes", "newest", "oldest"] = Query(default="votes", alias="sortBy"),
    forum: Forum = Depends(get_embed_forum),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).list_answers(forum, question_id, limit, sort_by)


@router.post("/questions", status_code=201)
async def ask_question(
    question_data: EmbedQuestionCreate,
    forum: Forum = Depends(get_embed_forum_for_write),
    session: AsyncSession = Depends(get_session)
):
    """Anonymous question posted through a widget."""
    return await EmbedService(session).ask(forum, question_data)


@router.post("/questions/{question_id}/answers", status_code=201)
async def post_answer(
    question_id: uuid.UUID,
    answer_data: EmbedAnswerCreate,
    forum: Forum = Depends(get_embed_forum_for_write),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).answer(forum, question_id, answer_data)


@router.post("/answers/{answer_id}/vote")
async def vote(
    answer_id: uuid.UUID,
    vote_data: EmbedVoteRequest,
    forum: Forum = Depends(get_embed_forum_for_write),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).vote(forum, answer_id, vote_data.is_upvote)


@router.post("/ai/answer-preview")
async def answer_preview(
    request: AnswerPreviewRequest,
    forum: Forum = Depends(get_embed_forum),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Preview of an AI answer; nothing is stored."""
    return await EmbedService(session, ai=ai).answer_preview(forum, request)


# Lead capture

@router.get("/lead-form/{form_id}")
async def lead_form(
    form_id: uuid.UUID,
    request: Request,
    forum: Forum = Depends(get_embed_forum),
    client_info: dict = Depends(get_client_info),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).lead_form(
        forum, form_id, referrer=request.headers.get("referer"), **client_info
    )


@router.post("/lead-form-submit", status_code=201)
async def submit_lead(
    submission: EmbedLeadFormSubmit,
    forum: Forum = Depends(get_embed_forum),
    client_info: dict = Depends(get_client_info),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).submit_lead(
        forum, submission.form_id, submission.form_data, **client_info
    )


@router.post("/track-form-view")
async def track_form_view(
    view: TrackFormViewRequest,
    forum: Forum = Depends(get_embed_forum),
    client_info: dict = Depends(get_client_info),
    session: AsyncSession = Depends(get_session)
):
    return await EmbedService(session).track_form_view(forum, view.form_id, view.referrer, **client_info)


# Redirects

@router.get("/redirect/{forum_id}")
async def redirect(
    forum_id: uuid.UUID,
    request: Request,
    dest: Optional[Literal["question", "category", "ask"]] = None,
    target_id: Optional[uuid.UUID] = Query(default=None, alias="id"),
    embed: Optional[str] = None,
    theme: Optional[str] = None,
    utm_source: str = "redirect",
    utm_medium: str = "forum",
    utm_campaign: str = "forum-redirect",
    track: bool = True,
    x_api_key: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session)
):
    """Send a widget click to the hosted forum page, tagging it for analytics."""
    embed_service = EmbedService(session)
    forum = await embed_service.resolve_forum(forum_id, x_api_key)
    url = await embed_service.redirect_url(
        forum,
        dest=dest,
        target_id=target_id,
        embed=embed,
        theme=theme,
        utm_source=utm_source,
        utm_medium=utm_medium,
        utm_campaign=utm_campaign,
        track=track,
        extra_params=dict(request.query_params),
        referrer=request.headers.get("referer"),
    )
    return RedirectResponse(url=url, status_code=307)

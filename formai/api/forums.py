"""
Forums API routes - forums, domains, categories, forum questions and forum-level SEO.
"""
import uuid
from typing import List, Optional, Literal

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.forum_service import ForumService
from formai.services.question_service import QuestionService
from formai.services.keyword_service import KeywordService
from formai.services.ai_service import AIContentService
from formai.schemas.forum import (
    ForumCreate, ForumUpdate, ForumDomainUpdate, ForumResponse, ForumPublicResponse, ForumSummary,
    CategoryCreate, CategoryResponse,
    DomainVerificationRequest, DomainVerificationCheck, DomainVerificationResponse
)
from formai.schemas.question import QuestionCreate, QuestionResponse, GenerateQuestionsRequest
from formai.schemas.seo import KeywordAnalysisRequest, ForumContentGapsRequest, ForumSeoQuestionsRequest
from formai.api.deps import get_current_user, get_optional_user, get_ai_service
from formai.models.user import User

router = APIRouter(prefix="/api/forums", tags=["forums"])


@router.post("/", response_model=ForumResponse, status_code=201)
async def create_forum(
    forum_data: ForumCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a new forum."""
    forum_service = ForumService(session)
    return await forum_service.create(current_user, forum_data)


@router.get("/", response_model=List[ForumSummary])
async def list_forums(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List the organization's forums with content totals."""
    forum_service = ForumService(session)
    return await forum_service.list_with_totals(current_user.current_org_id)


@router.get("/by-slug/{slug}", response_model=ForumPublicResponse)
async def get_forum_by_slug(slug: str, session: AsyncSession = Depends(get_session)):
    forum_service = ForumService(session)
    return await forum_service.get_public("slug", slug)


@router.get("/by-subdomain/{subdomain}", response_model=ForumPublicResponse)
async def get_forum_by_subdomain(subdomain: str, session: AsyncSession = Depends(get_session)):
    forum_service = ForumService(session)
    return await forum_service.get_public("subdomain", subdomain.lower())


@router.get("/by-domain/{domain}", response_model=ForumPublicResponse)
async def get_forum_by_domain(domain: str, session: AsyncSession = Depends(get_session)):
    forum_service = ForumService(session)
    return await forum_service.get_public("custom_domain", domain.lower())


@router.get("/{forum_id}", response_model=ForumResponse)
async def get_forum(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    forum_service = ForumService(session)
    return await forum_service.get(current_user.current_org_id, forum_id)


@router.patch("/{forum_id}", response_model=ForumResponse)
async def update_forum(
    forum_id: uuid.UUID,
    forum_data: ForumUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    forum_service = ForumService(session)
    return await forum_service.update(current_user, forum_id, forum_data)


@router.delete("/{forum_id}", status_code=204)
async def delete_forum(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a forum and everything in it."""
    forum_service = ForumService(session)
    await forum_service.delete(current_user, forum_id)


@router.patch("/{forum_id}/domain", response_model=ForumResponse)
async def update_forum_domain(
    forum_id: uuid.UUID,
    domain_data: ForumDomainUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Set or clear the subdomain and custom domain."""
    forum_service = ForumService(session)
    return await forum_service.update_domain(current_user, forum_id, domain_data)


@router.post("/{forum_id}/api-key", response_model=ForumResponse)
async def rotate_api_key(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Issue a new embed API key."""
    forum_service = ForumService(session)
    return await forum_service.rotate_api_key(current_user, forum_id)


@router.get("/{forum_id}/stats")
async def get_forum_stats(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    forum_service = ForumService(session)
    return await forum_service.stats(current_user.current_org_id, forum_id)


# Domain verification

@router.post("/{forum_id}/domain-verification", response_model=DomainVerificationResponse)
async def start_domain_verification(
    forum_id: uuid.UUID,
    request: DomainVerificationRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a token to publish as a DNS TXT record."""
    forum_service = ForumService(session)
    return await forum_service.start_domain_verification(current_user, forum_id, request.domain)


@router.post("/{forum_id}/domain-verification/check", response_model=DomainVerificationResponse)
async def check_domain_verification(
    forum_id: uuid.UUID,
    request: DomainVerificationCheck,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    forum_service = ForumService(session)
    return await forum_service.check_domain_verification(
        current_user, forum_id, request.domain, request.token
    )


# Categories

@router.get("/{forum_id}/categories", response_model=List[CategoryResponse])
async def list_categories(forum_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    forum_service = ForumService(session)
    return await forum_service.list_categories(forum_id)


@router.post("/{forum_id}/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    forum_id: uuid.UUID,
    category_data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    forum_service = ForumService(session)
    return await forum_service.create_category(current_user, forum_id, category_data)


@router.delete("/{forum_id}/categories/{category_id}", status_code=204)
async def delete_category(
    forum_id: uuid.UUID,
    category_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a category; its questions become uncategorized."""
    forum_service = ForumService(session)
    await forum_service.delete_category(current_user, forum_id, category_id)


# Questions

@router.get("/{forum_id}/questions", response_model=List[QuestionResponse])
async def list_questions(
    forum_id: uuid.UUID,
    type: Literal["recent", "popular"] = "recent",
    sort_by: Literal["views", "answers"] = "views",
    time_frame: int = Query(default=30, ge=0),
    category_id: Optional[uuid.UUID] = None,
    limit: int = Query(default=20, ge=1, le=100),
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    """Recent or popular questions. time_frame is in days, 0 means all time."""
    question_service = QuestionService(session)
    return await question_service.list_questions(
        forum_id,
        user=current_user,
        list_type=type,
        sort_by=sort_by,
        time_frame=time_frame,
        category_id=category_id,
        limit=limit
    )


@router.get("/{forum_id}/questions/search", response_model=List[QuestionResponse])
async def search_questions(
    forum_id: uuid.UUID,
    q: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    return await question_service.search(forum_id, q, user=current_user, limit=limit)


@router.post("/{forum_id}/questions", response_model=QuestionResponse, status_code=201)
async def create_question(
    forum_id: uuid.UUID,
    question_data: QuestionCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    return await question_service.create(current_user, forum_id, question_data)


@router.post("/{forum_id}/generate-questions", response_model=List[QuestionResponse], status_code=201)
async def generate_questions(
    forum_id: uuid.UUID,
    request: GenerateQuestionsRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Generate SEO questions with AI and add them to the forum."""
    question_service = QuestionService(session, ai=ai)
    return await question_service.generate_questions(current_user, forum_id, request)


# Forum-level keyword analysis

@router.post("/{forum_id}/keyword-analysis")
async def analyze_forum_keywords(
    forum_id: uuid.UUID,
    request: KeywordAnalysisRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Keyword strategy for the forum's main website."""
    keyword_service = KeywordService(session, ai=ai)
    return await keyword_service.analyze_website(current_user.current_org_id, forum_id, request.question_count)


@router.get("/{forum_id}/keyword-difficulty")
async def forum_keyword_difficulty(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    keyword_service = KeywordService(session, ai=ai)
    return {"keywords": await keyword_service.difficulty(current_user.current_org_id, forum_id)}


@router.post("/{forum_id}/content-gaps")
async def forum_content_gaps(
    forum_id: uuid.UUID,
    request: ForumContentGapsRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Subtopics the forum's questions do not cover yet."""
    keyword_service = KeywordService(session, ai=ai)
    return {"gaps": await keyword_service.content_gaps(current_user.current_org_id, forum_id, request.topic)}


@router.post("/{forum_id}/seo-questions")
async def forum_seo_questions(
    forum_id: uuid.UUID,
    request: ForumSeoQuestionsRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    keyword_service = KeywordService(session, ai=ai)
    questions = await keyword_service.seo_questions(current_user, forum_id, request)
    return {"questions": questions, "saved": request.save}

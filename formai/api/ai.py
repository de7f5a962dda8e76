"""
AI helper API routes. Nothing here is stored.
"""
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from formai.services.ai_service import AIContentService, FALLBACK_ANSWER
from formai.schemas.ai import (
    GenerateAnswerRequest, SeoQuestionsRequest, AnalyzeSeoRequest,
    AnalyzeWebsiteRequest, KeywordDifficultyRequest, ContentGapsRequest
)
from formai.api.deps import get_current_user, get_ai_service
from formai.models.user import User

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.get("/status")
async def ai_status(
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    return {"configured": ai.is_configured, "provider": ai.provider if ai.is_configured else None}


@router.post("/generate-answer")
async def generate_answer(
    request: GenerateAnswerRequest,
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    answer = await run_in_threadpool(
        ai.generate_answer, request.question_title, request.question_content, request.persona_type
    )
    return {
        "answer": answer,
        "persona_type": request.persona_type,
        "fallback": answer == FALLBACK_ANSWER,
    }


@router.post("/seo-questions")
async def seo_questions(
    request: SeoQuestionsRequest,
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    questions = await run_in_threadpool(
        ai.generate_seo_questions, request.topic, request.count, request.persona_type
    )
    return {"questions": questions}


@router.post("/analyze-seo")
async def analyze_seo(
    request: AnalyzeSeoRequest,
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    return await run_in_threadpool(ai.analyze_question_seo, request.title, request.content)


@router.post("/analyze-website-keywords")
async def analyze_website_keywords(
    request: AnalyzeWebsiteRequest,
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    return await run_in_threadpool(ai.analyze_website_keywords, request.url, request.question_count)


@router.post("/keyword-difficulty")
async def keyword_difficulty(
    request: KeywordDifficultyRequest,
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    return {"keywords": await run_in_threadpool(ai.keyword_difficulty, request.keywords)}


@router.post("/content-gaps")
async def content_gaps(
    request: ContentGapsRequest,
    current_user: User = Depends(get_current_user),
    ai: AIContentService = Depends(get_ai_service)
):
    return {"gaps": await run_in_threadpool(ai.content_gaps, request.topic, request.existing_titles)}

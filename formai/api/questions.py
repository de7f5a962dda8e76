"""
Questions API routes.
"""
import uuid
from typing import List, Optional, Literal

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.question_service import QuestionService
from formai.services.ai_service import AIContentService
from formai.schemas.question import QuestionDetail, AnswerCreate, AnswerResponse, AIAnswerRequest
from formai.api.deps import get_current_user, get_optional_user, get_ai_service
from formai.models.user import User

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("/{question_id}", response_model=QuestionDetail)
async def get_question(
    question_id: uuid.UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    """Question with category and answer count."""
    question_service = QuestionService(session)
    return await question_service.get_detail(question_id, current_user)


@router.post("/{question_id}/view")
async def record_question_view(
    question_id: uuid.UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    return await question_service.record_view(question_id, current_user)


@router.delete("/{question_id}", status_code=204)
async def delete_question(
    question_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a question with its answers and votes."""
    question_service = QuestionService(session)
    await question_service.delete(current_user, question_id)


@router.get("/{question_id}/answers", response_model=List[AnswerResponse])
async def list_answers(
    question_id: uuid.UUID,
    sort_by: Literal["votes", "newest", "oldest"] = "votes",
    limit: int = Query(default=20, ge=1, le=100),
    current_user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    return await question_service.list_answers(question_id, current_user, sort_by=sort_by, limit=limit)


@router.post("/{question_id}/answers", response_model=AnswerResponse, status_code=201)
async def create_answer(
    question_id: uuid.UUID,
    answer_data: AnswerCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    return await question_service.create_answer(current_user, question_id, answer_data)


@router.post("/{question_id}/ai-answer", response_model=AnswerResponse, status_code=201)
async def generate_ai_answer(
    question_id: uuid.UUID,
    request: AIAnswerRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Generate and store an answer in a persona's voice."""
    question_service = QuestionService(session, ai=ai)
    return await question_service.generate_ai_answer(
        current_user, question_id, persona_id=request.persona_id, persona_type=request.persona_type
    )

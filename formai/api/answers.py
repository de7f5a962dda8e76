"""
Answers API routes - deletion and voting.
"""
import uuid

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.question_service import QuestionService, user_voter_key
from formai.schemas.question import VoteRequest, VoteResponse
from formai.api.deps import get_current_user
from formai.models.user import User

router = APIRouter(prefix="/api/answers", tags=["answers"])


@router.delete("/{answer_id}", status_code=204)
async def delete_answer(
    answer_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    await question_service.delete_answer(current_user, answer_id)


@router.post("/{answer_id}/vote", response_model=VoteResponse)
async def vote_answer(
    answer_id: uuid.UUID,
    request: VoteRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Vote on an answer; voting again changes the direction."""
    question_service = QuestionService(session)
    return await question_service.vote(answer_id, user_voter_key(current_user), request.is_upvote, current_user)


@router.delete("/{answer_id}/vote", response_model=VoteResponse)
async def remove_vote(
    answer_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    question_service = QuestionService(session)
    return await question_service.remove_vote(answer_id, user_voter_key(current_user), current_user)

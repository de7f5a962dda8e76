"""
AI personas API routes.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.persona_service import PersonaService
from formai.services.ai_service import AIContentService
from formai.schemas.persona import (
    AIPersonaCreate, AIPersonaUpdate, AIPersonaResponse, PersonaTestRequest, PersonaFromWebsiteRequest
)
from formai.api.deps import get_current_user, get_ai_service
from formai.models.user import User

router = APIRouter(prefix="/api/ai-personas", tags=["ai-personas"])


@router.post("/", response_model=AIPersonaResponse, status_code=201)
async def create_persona(
    persona_data: AIPersonaCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a new AI persona."""
    persona_service = PersonaService(session)
    return await persona_service.create(current_user, persona_data)


@router.get("/", response_model=List[AIPersonaResponse])
async def list_personas(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List personas."""
    persona_service = PersonaService(session)
    return await persona_service.list(current_user.current_org_id, active_only)


@router.get("/stats")
async def persona_stats(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Totals by type and answers generated per persona."""
    persona_service = PersonaService(session)
    return await persona_service.stats(current_user.current_org_id)


@router.post("/generate-from-website")
async def generate_from_website(
    request: PersonaFromWebsiteRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Draft personas for a website's audience. Nothing is saved."""
    persona_service = PersonaService(session, ai=ai)
    return {"personas": await persona_service.generate_from_website(request.website_url, request.count)}


@router.get("/{persona_id}", response_model=AIPersonaResponse)
async def get_persona(
    persona_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Get a persona by ID."""
    persona_service = PersonaService(session)
    return await persona_service.get(current_user.current_org_id, persona_id)


@router.patch("/{persona_id}", response_model=AIPersonaResponse)
async def update_persona(
    persona_id: uuid.UUID,
    persona_data: AIPersonaUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Update a persona."""
    persona_service = PersonaService(session)
    return await persona_service.update(current_user, persona_id, persona_data)


@router.delete("/{persona_id}", status_code=204)
async def delete_persona(
    persona_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Delete a persona."""
    persona_service = PersonaService(session)
    await persona_service.delete(current_user, persona_id)


@router.post("/{persona_id}/test")
async def preview_persona(
    persona_id: uuid.UUID,
    request: PersonaTestRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    ai: AIContentService = Depends(get_ai_service)
):
    """Preview the persona's answer to a sample question."""
    persona_service = PersonaService(session, ai=ai)
    return await persona_service.test(
        current_user.current_org_id, persona_id, request.question_title, request.question_content
    )

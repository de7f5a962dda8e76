"""
AI persona service - persona management and previews.
"""
import uuid
from typing import List

from fastapi.concurrency import run_in_threadpool
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.config import settings
from formai.core.exceptions import raise_not_found, raise_bad_request
from formai.repositories.persona_repo import AIPersonaRepository
from formai.repositories.question_repo import AnswerRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.persona import AIPersona, PERSONA_TYPES
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.persona import AIPersonaCreate, AIPersonaUpdate
from formai.services.ai_service import AIContentService, ai_service


class PersonaService:
    """Service for AI persona operations."""

    def __init__(self, session: AsyncSession, ai: AIContentService = None):
        self.session = session
        self.ai = ai or ai_service
        self.persona_repo = AIPersonaRepository(session)
        self.answer_repo = AnswerRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def create(self, user: User, persona_data: AIPersonaCreate) -> AIPersona:
        """Create a new persona, up to the per-organization limit."""
        org_id = user.current_org_id
        if await self.persona_repo.count(org_id) >= settings.PERSONA_LIMIT:
            raise_bad_request(f"Persona limit reached ({settings.PERSONA_LIMIT} per organization)")

        data = persona_data.model_dump()
        data["org_id"] = org_id
        persona = await self.persona_repo.create(data)
        await self.activity_repo.log(
            org_id=org_id,
            actor_id=user.id,
            action=Actions.PERSONA_CREATED,
            entity_type="persona",
            entity_id=persona.id,
            description=f"Persona '{persona.name}' created"
        )
        return persona

    async def get(self, org_id: uuid.UUID, persona_id: uuid.UUID) -> AIPersona:
        """Get a persona by ID."""
        persona = await self.persona_repo.get_owned(persona_id, org_id)
        if not persona:
            raise_not_found("AI persona", str(persona_id))
        return persona

    async def list(self, org_id: uuid.UUID, active_only: bool = False) -> List[AIPersona]:
        """List personas for an organization."""
        if active_only:
            return await self.persona_repo.get_active(org_id)
        return await self.persona_repo.list(org_id)

    async def update(self, user: User, persona_id: uuid.UUID, persona_data: AIPersonaUpdate) -> AIPersona:
        """Update a persona."""
        persona = await self.get(user.current_org_id, persona_id)
        update_data = persona_data.model_dump(exclude_unset=True)
        persona = await self.persona_repo.update(persona.id, update_data)
        await self.activity_repo.log(
            org_id=persona.org_id,
            actor_id=user.id,
            action=Actions.PERSONA_UPDATED,
            entity_type="persona",
            entity_id=persona.id,
            meta_data={"fields": sorted(update_data)}
        )
        return persona

    async def delete(self, user: User, persona_id: uuid.UUID) -> bool:
        """Delete a persona. Answers it wrote keep their text."""
        persona = await self.get(user.current_org_id, persona_id)
        for answer in await self.answer_repo.list(filters={"persona_id": persona.id}):
            answer.persona_id = None
            self.session.add(answer)
        deleted = await self.persona_repo.delete(persona.id)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.PERSONA_DELETED,
            entity_type="persona",
            entity_id=persona_id
        )
        return deleted

    async def stats(self, org_id: uuid.UUID) -> dict:
        """Totals by type and generated answers per persona."""
        personas = await self.persona_repo.list(org_id)
        answers = await self.answer_repo.count_by_persona([p.id for p in personas])

        by_type = {persona_type: 0 for persona_type in PERSONA_TYPES}
        for persona in personas:
            by_type[persona.type] = by_type.get(persona.type, 0) + 1

        return {
            "total": len(personas),
            "active": sum(1 for p in personas if p.is_active),
            "limit": settings.PERSONA_LIMIT,
            "by_type": by_type,
            "answers_by_persona": [
                {"persona_id": p.id, "name": p.name, "answers": answers.get(p.id, 0)}
                for p in personas
            ],
        }

    async def test(self, org_id: uuid.UUID, persona_id: uuid.UUID, title: str, content: str) -> dict:
        """Preview how the persona would answer a sample question. Nothing is stored."""
        persona = await self.get(org_id, persona_id)
        answer = await run_in_threadpool(self.ai.generate_answer, title, content, persona.type, persona)
        return {"persona_id": persona.id, "persona_type": persona.type, "answer": answer}

    async def generate_from_website(self, website_url: str, count: int) -> List[dict]:
        """AI drafts of personas for a website. The caller decides which to save."""
        return await run_in_threadpool(self.ai.generate_persona_suggestions, website_url, count)

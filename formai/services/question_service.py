"""
Question service - questions, answers, votes and AI generated content.
"""
import uuid
import logging
from typing import Optional, List

from fastapi.concurrency import run_in_threadpool
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.core.exceptions import raise_not_found, ExternalServiceError
from formai.repositories.forum_repo import ForumRepository, CategoryRepository
from formai.repositories.question_repo import QuestionRepository, AnswerRepository, VoteRepository
from formai.repositories.persona_repo import AIPersonaRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.forum import Forum
from formai.models.question import Question, Answer
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.question import QuestionCreate, AnswerCreate, GenerateQuestionsRequest
from formai.services.ai_service import AIContentService, ai_service, FALLBACK_ANSWER

logger = logging.getLogger(__name__)


def question_to_dict(question: Question, answer_count: int = 0) -> dict:
    return {**question.model_dump(), "answer_count": answer_count}


def answer_to_dict(answer: Answer, score: int = 0) -> dict:
    return {**answer.model_dump(), "score": score}


def user_voter_key(user: User) -> str:
    return f"user:{user.id}"


class QuestionService:
    """Service for question and answer operations."""

    def __init__(self, session: AsyncSession, ai: AIContentService = None):
        self.session = session
        self.ai = ai or ai_service
        self.forum_repo = ForumRepository(session)
        self.category_repo = CategoryRepository(session)
        self.question_repo = QuestionRepository(session)
        self.answer_repo = AnswerRepository(session)
        self.vote_repo = VoteRepository(session)
        self.persona_repo = AIPersonaRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    # Access helpers

    async def readable_forum(self, forum_id: uuid.UUID, user: Optional[User] = None) -> Forum:
        """Public forums are readable by anyone, private ones by their organization."""
        forum = await self.forum_repo.get(forum_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))
        if not forum.is_public and (not user or user.current_org_id != forum.org_id):
            raise_not_found("Forum", str(forum_id))
        return forum

    async def owned_forum(self, user: User, forum_id: uuid.UUID) -> Forum:
        forum = await self.forum_repo.get(forum_id)
        if not forum or forum.org_id != user.current_org_id:
            raise_not_found("Forum", str(forum_id))
        return forum

    async def _question_with_forum(self, question_id: uuid.UUID, user: Optional[User] = None):
        question = await self.question_repo.get(question_id)
        if not question:
            raise_not_found("Question", str(question_id))
        forum = await self.forum_repo.get(question.forum_id)
        if not forum or (not forum.is_public and (not user or user.current_org_id != forum.org_id)):
            raise_not_found("Question", str(question_id))
        return question, forum

    async def _owned_question(self, user: User, question_id: uuid.UUID):
        question = await self.question_repo.get(question_id)
        if not question:
            raise_not_found("Question", str(question_id))
        forum = await self.forum_repo.get(question.forum_id)
        if not forum or forum.org_id != user.current_org_id:
            raise_not_found("Question", str(question_id))
        return question, forum

    async def _check_category(self, forum_id: uuid.UUID, category_id: Optional[uuid.UUID]) -> None:
        if category_id is None:
            return
        category = await self.category_repo.get(category_id)
        if not category or category.forum_id != forum_id:
            raise_not_found("Category", str(category_id))

    # Questions

    async def list_questions(
        self,
        forum_id: uuid.UUID,
        user: Optional[User] = None,
        list_type: str = "recent",
        sort_by: str = "views",
        time_frame: int = 30,
        category_id: Optional[uuid.UUID] = None,
        limit: int = 20
    ) -> List[dict]:
        forum = await self.readable_forum(forum_id, user)
        rows = await self.question_repo.list_for_forum(
            forum.id,
            list_type=list_type,
            sort_by=sort_by,
            time_frame=time_frame,
            category_id=category_id,
            limit=limit
        )
        return [question_to_dict(q, count) for q, count in rows]

    async def search(self, forum_id: uuid.UUID, term: str, user: Optional[User] = None, limit: int = 20) -> List[dict]:
        forum = await self.readable_forum(forum_id, user)
        rows = await self.question_repo.search(forum.id, term.strip(), limit)
        return [question_to_dict(q, count) for q, count in rows]

    async def get_detail(self, question_id: uuid.UUID, user: Optional[User] = None) -> dict:
        """Question with category and answer count."""
        question, forum = await self._question_with_forum(question_id, user)
        return await self.detail(question)

    async def detail(self, question: Question) -> dict:
        data = question_to_dict(question, await self.question_repo.answer_count(question.id))
        category = await self.category_repo.get(question.category_id) if question.category_id else None
        data["category_name"] = category.name if category else None
        data["category_slug"] = category.slug if category else None
        return data

    async def create(self, user: User, forum_id: uuid.UUID, question_data: QuestionCreate) -> dict:
        forum = await self.owned_forum(user, forum_id)
        await self._check_category(forum.id, question_data.category_id)

        question = await self.question_repo.create({
            **question_data.model_dump(),
            "forum_id": forum.id,
            "author_id": user.id,
            "author_name": user.public_name,
            "source": "dashboard",
        })
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.QUESTION_CREATED,
            entity_type="question",
            entity_id=question.id,
            description=question.title[:120]
        )
        return question_to_dict(question)

    async def create_anonymous(
        self,
        forum: Forum,
        question_data: QuestionCreate,
        author_name: Optional[str] = None,
        source: str = "embed"
    ) -> Question:
        """Question posted through the embed API."""
        await self._check_category(forum.id, question_data.category_id)
        question = await self.question_repo.create({
            **question_data.model_dump(),
            "forum_id": forum.id,
            "author_name": author_name or "Anonymous",
            "source": source,
        })
        await self.activity_repo.log(
            org_id=forum.org_id,
            action=Actions.QUESTION_CREATED,
            entity_type="question",
            entity_id=question.id,
            description=question.title[:120],
            meta_data={"source": source}
        )
        return question

    async def record_view(self, question_id: uuid.UUID, user: Optional[User] = None) -> dict:
        question, _ = await self._question_with_forum(question_id, user)
        question = await self.question_repo.increment_views(question)
        return {"id": question.id, "views": question.views}

    async def delete(self, user: User, question_id: uuid.UUID) -> None:
        question, forum = await self._owned_question(user, question_id)
        await self.question_repo.delete_with_answers(question)
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.QUESTION_DELETED,
            entity_type="question",
            entity_id=question_id
        )

    # Answers

    async def list_answers(
        self,
        question_id: uuid.UUID,
        user: Optional[User] = None,
        sort_by: str = "votes",
        limit: int = 20
    ) -> List[dict]:
        question, _ = await self._question_with_forum(question_id, user)
        rows = await self.answer_repo.list_for_question(question.id, sort_by=sort_by, limit=limit)
        return [answer_to_dict(a, score) for a, score in rows]

    async def create_answer(self, user: User, question_id: uuid.UUID, answer_data: AnswerCreate) -> dict:
        question, forum = await self._question_with_forum(question_id, user)
        answer = await self.answer_repo.create({
            "question_id": question.id,
            "author_id": user.id,
            "author_name": user.public_name,
            "content": answer_data.content,
        })
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.ANSWER_CREATED,
            entity_type="answer",
            entity_id=answer.id,
            meta_data={"question_id": str(question.id)}
        )
        return answer_to_dict(answer)

    async def create_anonymous_answer(
        self,
        forum: Forum,
        question: Question,
        content: str,
        author_name: Optional[str] = None
    ) -> Answer:
        answer = await self.answer_repo.create({
            "question_id": question.id,
            "author_name": author_name or "Anonymous",
            "content": content,
        })
        await self.activity_repo.log(
            org_id=forum.org_id,
            action=Actions.ANSWER_CREATED,
            entity_type="answer",
            entity_id=answer.id,
            meta_data={"question_id": str(question.id), "source": "embed"}
        )
        return answer

    async def _answer_with_forum(self, answer_id: uuid.UUID, user: Optional[User] = None):
        answer = await self.answer_repo.get(answer_id)
        if not answer:
            raise_not_found("Answer", str(answer_id))
        question, forum = await self._question_with_forum(answer.question_id, user)
        return answer, forum

    async def delete_answer(self, user: User, answer_id: uuid.UUID) -> None:
        """Answers can be removed by their author or by the forum's organization."""
        answer, forum = await self._answer_with_forum(answer_id, user)
        if forum.org_id != user.current_org_id and answer.author_id != user.id:
            raise_not_found("Answer", str(answer_id))
        await self.answer_repo.delete_with_votes(answer)
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.ANSWER_DELETED,
            entity_type="answer",
            entity_id=answer_id
        )

    async def vote(self, answer_id: uuid.UUID, voter_key: str, is_upvote: bool, user: Optional[User] = None) -> dict:
        """Create the voter's vote or change its direction."""
        answer, _ = await self._answer_with_forum(answer_id, user)
        vote = await self.vote_repo.upsert(answer.id, voter_key, is_upvote)
        return {
            "answer_id": answer.id,
            "is_upvote": vote.is_upvote,
            "score": await self.vote_repo.score(answer.id),
        }

    async def remove_vote(self, answer_id: uuid.UUID, voter_key: str, user: Optional[User] = None) -> dict:
        answer, _ = await self._answer_with_forum(answer_id, user)
        vote = await self.vote_repo.get_vote(answer.id, voter_key)
        if not vote:
            raise_not_found("Vote")
        await self.vote_repo.delete(vote.id)
        return {
            "answer_id": answer.id,
            "is_upvote": None,
            "score": await self.vote_repo.score(answer.id),
        }

    # AI

    async def generate_ai_answer(
        self,
        user: User,
        question_id: uuid.UUID,
        persona_id: Optional[uuid.UUID] = None,
        persona_type: str = "expert"
    ) -> dict:
        """Generate and store an answer written in a persona's voice."""
        question, forum = await self._owned_question(user, question_id)

        persona = None
        if persona_id:
            persona = await self.persona_repo.get(persona_id)
            if not persona or persona.org_id != forum.org_id:
                raise_not_found("AI persona", str(persona_id))
            persona_type = persona.type

        content = await run_in_threadpool(
            self.ai.generate_answer, question.title, question.content, persona_type, persona
        )
        if content == FALLBACK_ANSWER:
            raise ExternalServiceError("AI provider", "could not generate an answer")

        answer = await self.answer_repo.create({
            "question_id": question.id,
            "author_name": persona.name if persona else f"AI {persona_type.title()}",
            "content": content,
            "is_ai_generated": True,
            "ai_persona_type": persona_type,
            "persona_id": persona.id if persona else None,
        })
        await self.activity_repo.log(
            org_id=forum.org_id,
            actor_id=user.id,
            action=Actions.ANSWER_GENERATED,
            entity_type="answer",
            entity_id=answer.id,
            meta_data={"question_id": str(question.id), "persona_type": persona_type}
        )
        return answer_to_dict(answer)

    async def generate_questions(self, user: User, forum_id: uuid.UUID, request: GenerateQuestionsRequest) -> List[dict]:
        """Generate SEO questions and store them as AI-sourced questions."""
        forum = await self.owned_forum(user, forum_id)
        await self._check_category(forum.id, request.category_id)

        drafts = await run_in_threadpool(
            self.ai.generate_seo_questions, request.topic, request.count, request.persona_type
        )
        created = []
        for draft in drafts:
            question = await self.question_repo.create({
                "forum_id": forum.id,
                "category_id": request.category_id,
                "title": draft["title"],
                "content": draft["content"],
                "author_name": f"AI {request.persona_type.title()}",
                "is_ai_generated": True,
                "ai_persona_type": request.persona_type,
                "source": "ai",
            })
            created.append(question_to_dict(question))

        if created:
            await self.activity_repo.log(
                org_id=forum.org_id,
                actor_id=user.id,
                action=Actions.QUESTIONS_GENERATED,
                entity_type="forum",
                entity_id=forum.id,
                description=f"{len(created)} questions generated about '{request.topic}'"
            )
        logger.info(f"Generated {len(created)} questions for forum {forum.id}")
        return created

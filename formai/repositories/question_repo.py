"""
Question, answer and vote repositories.
"""
import uuid
from typing import Optional, List, Tuple
from datetime import datetime, timedelta

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import and_, case, delete, func, or_

from formai.models.interlink import ContentInterlink
from formai.models.question import Question, Answer, Vote
from formai.repositories.base import BaseRepository


def _answer_counts():
    return (
        select(Answer.question_id, func.count(Answer.id).label("answer_count"))
        .group_by(Answer.question_id)
        .subquery()
    )


def _interlinks_touching(content_type: str, ids):
    """Delete statement for links whose source or target is one of ids."""
    return delete(ContentInterlink).where(or_(
        and_(ContentInterlink.source_type == content_type, ContentInterlink.source_id.in_(ids)),
        and_(ContentInterlink.target_type == content_type, ContentInterlink.target_id.in_(ids)),
    ))


def _vote_scores():
    return (
        select(
            Vote.answer_id,
            func.sum(case((Vote.is_upvote == True, 1), else_=-1)).label("score"),
        )
        .group_by(Vote.answer_id)
        .subquery()
    )


class QuestionRepository(BaseRepository[Question]):
    """Repository for Question operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Question, session)

    async def list_for_forum(
        self,
        forum_id: uuid.UUID,
        list_type: str = "recent",
        sort_by: str = "views",
        time_frame: int = 30,
        category_id: Optional[uuid.UUID] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[Tuple[Question, int]]:
        """
        List questions of a forum with their answer counts.

        "recent" orders by creation date. "popular" orders by views or by
        answer count, restricted to the last ``time_frame`` days (0 = all time).
        """
        counts = _answer_counts()
        answer_count = func.coalesce(counts.c.answer_count, 0)
        query = (
            select(Question, answer_count)
            .outerjoin(counts, counts.c.question_id == Question.id)
            .where(Question.forum_id == forum_id)
        )

        if category_id:
            query = query.where(Question.category_id == category_id)

        if list_type == "popular":
            if time_frame and time_frame > 0:
                since = datetime.utcnow() - timedelta(days=time_frame)
                query = query.where(Question.created_at >= since)
            if sort_by == "answers":
                query = query.order_by(answer_count.desc(), Question.created_at.desc())
            else:
                query = query.order_by(Question.views.desc(), Question.created_at.desc())
        else:
            query = query.order_by(Question.created_at.desc())

        query = query.offset(offset).limit(limit)
        result = await self.session.exec(query)
        return [(question, count) for question, count in result.all()]

    async def search(self, forum_id: uuid.UUID, term: str, limit: int = 20) -> List[Tuple[Question, int]]:
        """Case-insensitive substring search over title and content."""
        pattern = f"%{term}%"
        counts = _answer_counts()
        query = (
            select(Question, func.coalesce(counts.c.answer_count, 0))
            .outerjoin(counts, counts.c.question_id == Question.id)
            .where(
                Question.forum_id == forum_id,
                or_(Question.title.ilike(pattern), Question.content.ilike(pattern)),
            )
            .order_by(Question.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return [(question, count) for question, count in result.all()]

    async def answer_count(self, question_id: uuid.UUID) -> int:
        result = await self.session.exec(
            select(func.count()).select_from(Answer).where(Answer.question_id == question_id)
        )
        return result.one()

    async def increment_views(self, question: Question) -> Question:
        question.views = (question.views or 0) + 1
        return await self.save(question)

    async def list_titles(self, forum_id: uuid.UUID, limit: int = 100) -> List[str]:
        query = (
            select(Question.title)
            .where(Question.forum_id == forum_id)
            .order_by(Question.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def list_for_forums(
        self,
        forum_ids: List[uuid.UUID],
        limit: int
    ) -> List[Question]:
        if not forum_ids:
            return []
        query = (
            select(Question)
            .where(Question.forum_id.in_(forum_ids))
            .order_by(Question.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def delete_with_answers(self, question: Question) -> None:
        """Delete a question with its answers, their votes and any interlinks to or from them."""
        answer_ids = select(Answer.id).where(Answer.question_id == question.id)
        await self.session.execute(_interlinks_touching("answer", answer_ids))
        await self.session.execute(_interlinks_touching("question", [question.id]))
        await self.session.execute(delete(Vote).where(Vote.answer_id.in_(answer_ids)))
        await self.session.execute(delete(Answer).where(Answer.question_id == question.id))
        await self.session.delete(question)
        await self.session.commit()


class AnswerRepository(BaseRepository[Answer]):
    """Repository for Answer operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Answer, session)

    async def list_for_question(
        self,
        question_id: uuid.UUID,
        sort_by: str = "votes",
        limit: int = 20
    ) -> List[Tuple[Answer, int]]:
        """Answers with their vote score (upvotes minus downvotes)."""
        scores = _vote_scores()
        score = func.coalesce(scores.c.score, 0)
        query = (
            select(Answer, score)
            .outerjoin(scores, scores.c.answer_id == Answer.id)
            .where(Answer.question_id == question_id)
        )

        if sort_by == "newest":
            query = query.order_by(Answer.created_at.desc())
        elif sort_by == "oldest":
            query = query.order_by(Answer.created_at.asc())
        else:
            query = query.order_by(score.desc(), Answer.created_at.asc())

        query = query.limit(limit)
        result = await self.session.exec(query)
        return [(answer, int(value)) for answer, value in result.all()]

    async def list_for_forums(self, forum_ids: List[uuid.UUID], limit: int) -> List[Answer]:
        if not forum_ids:
            return []
        query = (
            select(Answer)
            .join(Question, Answer.question_id == Question.id)
            .where(Question.forum_id.in_(forum_ids))
            .order_by(Answer.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def count_by_persona(self, persona_ids: List[uuid.UUID]) -> dict:
        """Number of generated answers per persona id."""
        if not persona_ids:
            return {}
        query = (
            select(Answer.persona_id, func.count(Answer.id))
            .where(Answer.persona_id.in_(persona_ids))
            .group_by(Answer.persona_id)
        )
        result = await self.session.exec(query)
        return {persona_id: count for persona_id, count in result.all()}

    async def delete_with_votes(self, answer: Answer) -> None:
        await self.session.execute(_interlinks_touching("answer", [answer.id]))
        await self.session.execute(delete(Vote).where(Vote.answer_id == answer.id))
        await self.session.delete(answer)
        await self.session.commit()


class VoteRepository(BaseRepository[Vote]):
    """Repository for Vote operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Vote, session)

    async def get_vote(self, answer_id: uuid.UUID, voter_key: str) -> Optional[Vote]:
        query = select(Vote).where(Vote.answer_id == answer_id, Vote.voter_key == voter_key)
        result = await self.session.exec(query)
        return result.first()

    async def upsert(self, answer_id: uuid.UUID, voter_key: str, is_upvote: bool) -> Vote:
        """Create the voter's vote or flip an existing one."""
        vote = await self.get_vote(answer_id, voter_key)
        if vote:
            vote.is_upvote = is_upvote
            vote.updated_at = datetime.utcnow()
            return await self.save(vote)
        return await self.create({
            "answer_id": answer_id,
            "voter_key": voter_key,
            "is_upvote": is_upvote,
        })

    async def score(self, answer_id: uuid.UUID) -> int:
        query = select(
            func.coalesce(func.sum(case((Vote.is_upvote == True, 1), else_=-1)), 0)
        ).where(Vote.answer_id == answer_id)
        result = await self.session.exec(query)
        return int(result.one())

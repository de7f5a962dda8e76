"""
Shared data access for tenant-scoped SQLModel tables.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, List, Any
from datetime import datetime

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from formai.core.pagination import create_paginated_response

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    CRUD for one model class.

    Tables with an ``org_id`` column are filtered by organization whenever
    an org_id is passed, and ``get_owned`` hides rows of other tenants.
    Filter values of None are skipped so optional query params can be
    handed through unchanged.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    @property
    def is_tenant_scoped(self) -> bool:
        return hasattr(self.model, "org_id")

    def _apply_filters(self, query, org_id: Optional[uuid.UUID], filters: Optional[dict]):
        if org_id and self.is_tenant_scoped:
            query = query.where(self.model.org_id == org_id)
        for field, value in (filters or {}).items():
            if value is not None and hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)
        return query

    def _ordered(self, query, order_by: str, order_desc: bool):
        column = getattr(self.model, order_by, None)
        if column is None:
            return query
        return query.order_by(column.desc() if order_desc else column.asc())

    async def _commit(self, db_obj: ModelType) -> ModelType:
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def create(self, obj_in: dict) -> ModelType:
        return await self._commit(self.model(**obj_in))

    async def save(self, db_obj: ModelType) -> ModelType:
        """Persist changes made directly on a loaded record."""
        return await self._commit(db_obj)

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def get_owned(self, id: uuid.UUID, org_id: uuid.UUID) -> Optional[ModelType]:
        """Record by ID, or None when it belongs to another organization."""
        db_obj = await self.get(id)
        if db_obj is None or getattr(db_obj, "org_id", None) != org_id:
            return None
        return db_obj

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        result = await self.session.exec(select(self.model).where(getattr(self.model, field) == value))
        return result.first()

    async def list(
        self,
        org_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = True,
        limit: Optional[int] = None
    ) -> List[ModelType]:
        query = self._ordered(self._apply_filters(select(self.model), org_id, filters), order_by, order_desc)
        if limit:
            query = query.limit(limit)
        result = await self.session.exec(query)
        return list(result.all())

    async def list_paginated(
        self,
        org_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        page: int = 1,
        limit: int = 20,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> dict:
        """One page of records plus the total across all pages."""
        query = self._apply_filters(select(self.model), org_id, filters)
        total = (await self.session.exec(select(func.count()).select_from(query.subquery()))).one()

        query = self._ordered(query, order_by, order_desc).offset((page - 1) * limit).limit(limit)
        items = (await self.session.exec(query)).all()
        return create_paginated_response(items, total, page, limit)

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """Apply the non-None values of obj_in and bump updated_at."""
        db_obj = await self.get(id)
        if db_obj is None:
            return None
        for field, value in obj_in.items():
            if value is not None and hasattr(db_obj, field):
                setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = datetime.utcnow()
        return await self._commit(db_obj)

    async def delete(self, id: uuid.UUID) -> bool:
        db_obj = await self.get(id)
        if db_obj is None:
            return False
        await self.session.delete(db_obj)
        await self.session.commit()
        return True

    async def count(self, org_id: Optional[uuid.UUID] = None, filters: Optional[dict] = None) -> int:
        query = self._apply_filters(select(func.count()).select_from(self.model), org_id, filters)
        return (await self.session.exec(query)).one()

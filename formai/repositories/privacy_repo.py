"""
Consent and data export repositories.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.models.privacy import ConsentRecord, DataExport
from formai.repositories.base import BaseRepository


class ConsentRepository(BaseRepository[ConsentRecord]):
    """Repository for ConsentRecord operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ConsentRecord, session)

    async def get_for(
        self,
        org_id: uuid.UUID,
        provider: str,
        consent_type: str = "data_sharing"
    ) -> Optional[ConsentRecord]:
        query = select(ConsentRecord).where(
            ConsentRecord.org_id == org_id,
            ConsentRecord.provider == provider,
            ConsentRecord.consent_type == consent_type
        )
        result = await self.session.exec(query)
        return result.first()

    async def has_granted(self, org_id: uuid.UUID, provider: str) -> bool:
        query = select(ConsentRecord).where(
            ConsentRecord.org_id == org_id,
            ConsentRecord.provider == provider,
            ConsentRecord.granted == True
        )
        result = await self.session.exec(query)
        return result.first() is not None


class DataExportRepository(BaseRepository[DataExport]):
    """Repository for DataExport operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(DataExport, session)

    async def list_for_org(self, org_id: uuid.UUID, status: Optional[str] = None) -> List[DataExport]:
        return await self.list(org_id=org_id, filters={"status": status})

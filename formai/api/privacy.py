"""
Privacy API routes - AI provider consent and anonymized exports.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session, get_session_factory
from formai.services.privacy_service import PrivacyService, run_export_task
from formai.schemas.privacy import ConsentRequest, ConsentResponse, DataExportCreate, DataExportResponse
from formai.api.deps import get_current_user
from formai.models.user import User

router = APIRouter(prefix="/api/privacy", tags=["privacy"])


# Consent

@router.post("/consents", response_model=ConsentResponse)
async def grant_consent(
    consent_data: ConsentRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    return await privacy_service.grant_consent(current_user, consent_data)


@router.delete("/consents/{provider}", response_model=ConsentResponse)
async def revoke_consent(
    provider: str,
    consent_type: str = "data_sharing",
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    return await privacy_service.revoke_consent(current_user, provider, consent_type)


@router.get("/consents", response_model=List[ConsentResponse])
async def list_consents(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    return await privacy_service.list_consents(current_user.current_org_id)


@router.get("/consents/stats")
async def consent_stats(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    return await privacy_service.consent_stats(current_user.current_org_id)


# Exports

@router.post("/exports", response_model=DataExportResponse, status_code=202)
async def create_export(
    export_data: DataExportCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    session_factory=Depends(get_session_factory)
):
    """Queue an anonymized export; it is built after the response is sent."""
    privacy_service = PrivacyService(session)
    export = await privacy_service.create_export(current_user, export_data)
    background_tasks.add_task(run_export_task, export.id, session_factory)
    return export


@router.get("/exports", response_model=List[DataExportResponse])
async def list_exports(
    status: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    return await privacy_service.list_exports(current_user.current_org_id, status)


@router.get("/exports/{export_id}", response_model=DataExportResponse)
async def get_export(
    export_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    return await privacy_service.get_export(current_user.current_org_id, export_id)


@router.get("/exports/{export_id}/download")
async def download_export(
    export_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    payload, media_type, filename = await privacy_service.download(current_user.current_org_id, export_id)

    return Response(
        content=payload,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.delete("/exports/{export_id}", status_code=204)
async def delete_export(
    export_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    privacy_service = PrivacyService(session)
    await privacy_service.delete_export(current_user.current_org_id, export_id)

"""
Lead form API routes.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.database import get_session
from formai.services.lead_service import LeadService
from formai.schemas.lead import (
    LeadFormCreate, LeadFormUpdate, LeadFormResponse, LeadFormDetail,
    LeadSubmissionCreate, LeadSubmissionResponse, SubmissionResult, FormViewCreate
)
from formai.schemas.common import MessageResponse
from formai.api.deps import get_current_user, get_client_info
from formai.models.user import User

router = APIRouter(prefix="/api/lead-forms", tags=["lead-forms"])


@router.get("/", response_model=List[LeadFormResponse])
async def list_forms(
    forum_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    return await lead_service.list_for_forum(current_user.current_org_id, forum_id)


@router.get("/mine", response_model=List[LeadFormResponse])
async def list_my_forms(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Forms across every forum of the current organization."""
    lead_service = LeadService(session)
    return await lead_service.list_for_org(current_user.current_org_id)


@router.get("/recent-submissions", response_model=List[LeadSubmissionResponse])
async def recent_submissions(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    return await lead_service.recent_submissions(current_user.current_org_id)


@router.post("/", response_model=LeadFormResponse, status_code=201)
async def create_form(
    form_data: LeadFormCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    return await lead_service.create(current_user, form_data)


@router.get("/{form_id}", response_model=LeadFormDetail)
async def get_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Form with view, submission and conversion counts."""
    lead_service = LeadService(session)
    return await lead_service.get_detail(current_user.current_org_id, form_id)


@router.patch("/{form_id}", response_model=LeadFormResponse)
async def update_form(
    form_id: uuid.UUID,
    form_data: LeadFormUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    return await lead_service.update(current_user, form_id, form_data)


@router.delete("/{form_id}", status_code=204)
async def delete_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    await lead_service.delete(current_user, form_id)


@router.post("/{form_id}/submissions", response_model=SubmissionResult, status_code=201)
async def submit_form(
    form_id: uuid.UUID,
    submission_data: LeadSubmissionCreate,
    client_info: dict = Depends(get_client_info),
    session: AsyncSession = Depends(get_session)
):
    """Public endpoint: a visitor fills in the form."""
    lead_service = LeadService(session)
    form = await lead_service.get_active_form(form_id)
    submission = await lead_service.submit(form.id, submission_data.form_data, **client_info)
    return lead_service.submission_result(form, submission)


@router.post("/{form_id}/view", response_model=MessageResponse)
async def record_form_view(
    form_id: uuid.UUID,
    view_data: FormViewCreate,
    client_info: dict = Depends(get_client_info),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    await lead_service.record_view(form_id, view_data.referrer, **client_info)
    return MessageResponse(message="View recorded")


@router.get("/{form_id}/submissions", response_model=List[LeadSubmissionResponse])
async def list_submissions(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    lead_service = LeadService(session)
    return await lead_service.list_submissions(current_user.current_org_id, form_id)


@router.get("/{form_id}/export")
async def export_submissions(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Export submissions to CSV."""
    lead_service = LeadService(session)
    filename, csv_content = await lead_service.export(current_user, form_id)

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

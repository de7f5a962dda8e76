"""
Lead service - lead forms, submissions, views and CSV export.
"""
import csv
import io
import uuid
import logging
from typing import Optional, List, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from formai.core.exceptions import raise_not_found, raise_bad_request, raise_validation_error
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.lead_repo import LeadFormRepository, LeadSubmissionRepository, LeadFormViewRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.lead import LeadForm, LeadSubmission
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.lead import LeadFormCreate, LeadFormUpdate

logger = logging.getLogger(__name__)

RECENT_SUBMISSIONS = 20


def extract_contact(form_data: dict) -> Tuple[str, Optional[str], Optional[str]]:
    """
    Pull email and names out of free-form submission data.

    The email comes from the first key containing "email"; names from keys
    containing "first"/"last" together with "name".
    """
    email = first_name = last_name = None
    for key, value in form_data.items():
        lowered = key.lower()
        if email is None and "email" in lowered:
            email = str(value).strip() if value is not None else ""
        elif first_name is None and "first" in lowered and "name" in lowered:
            first_name = str(value).strip() or None
        elif last_name is None and "last" in lowered and "name" in lowered:
            last_name = str(value).strip() or None

    if not email:
        raise_validation_error("An email address is required")
    return email, first_name, last_name


def conversion_rate(views: int, submissions: int) -> float:
    """Submissions per view, in percent."""
    if not views:
        return 0.0
    return round(submissions / views * 100, 1)


class LeadService:
    """Service for lead capture operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.forum_repo = ForumRepository(session)
        self.form_repo = LeadFormRepository(session)
        self.submission_repo = LeadSubmissionRepository(session)
        self.view_repo = LeadFormViewRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def _owned_form(self, org_id: uuid.UUID, form_id: uuid.UUID) -> LeadForm:
        form = await self.form_repo.get(form_id)
        if form:
            forum = await self.forum_repo.get(form.forum_id)
            if forum and forum.org_id == org_id:
                return form
        raise_not_found("Lead form", str(form_id))

    async def _check_forum(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> None:
        forum = await self.forum_repo.get_owned(forum_id, org_id)
        if not forum:
            raise_not_found("Forum", str(forum_id))

    async def form_stats(self, form_id: uuid.UUID) -> dict:
        views = await self.view_repo.count_for_forms([form_id])
        submissions = await self.submission_repo.count_for_forms([form_id])
        return {
            "views": views,
            "submissions": submissions,
            "conversion_rate": conversion_rate(views, submissions),
        }

    # Forms

    async def list_for_forum(self, org_id: uuid.UUID, forum_id: uuid.UUID) -> List[LeadForm]:
        await self._check_forum(org_id, forum_id)
        return await self.form_repo.list(filters={"forum_id": forum_id})

    async def list_for_org(self, org_id: uuid.UUID) -> List[LeadForm]:
        forum_ids = await self.forum_repo.list_ids_for_org(org_id)
        return await self.form_repo.list_for_forums(forum_ids)

    async def get_detail(self, org_id: uuid.UUID, form_id: uuid.UUID) -> dict:
        form = await self._owned_form(org_id, form_id)
        return {**form.model_dump(), "stats": await self.form_stats(form.id)}

    async def create(self, user: User, form_data: LeadFormCreate) -> LeadForm:
        await self._check_forum(user.current_org_id, form_data.forum_id)
        form = await self.form_repo.create(form_data.model_dump())
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.LEAD_FORM_CREATED,
            entity_type="lead_form",
            entity_id=form.id,
            description=f"Lead form '{form.name}' created"
        )
        return form

    async def update(self, user: User, form_id: uuid.UUID, form_data: LeadFormUpdate) -> LeadForm:
        form = await self._owned_form(user.current_org_id, form_id)
        update_data = form_data.model_dump(exclude_unset=True)
        form = await self.form_repo.update(form.id, update_data)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.LEAD_FORM_UPDATED,
            entity_type="lead_form",
            entity_id=form.id,
            meta_data={"fields": sorted(update_data)}
        )
        return form

    async def delete(self, user: User, form_id: uuid.UUID) -> None:
        form = await self._owned_form(user.current_org_id, form_id)
        name = form.name
        await self.form_repo.delete_with_submissions(form)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.LEAD_FORM_DELETED,
            entity_type="lead_form",
            entity_id=form_id,
            description=f"Lead form '{name}' deleted"
        )

    # Public capture

    async def get_active_form(self, form_id: uuid.UUID, forum_id: Optional[uuid.UUID] = None) -> LeadForm:
        """A form visitors may fill in, optionally restricted to one forum."""
        form = await self.form_repo.get(form_id)
        if not form or (forum_id and form.forum_id != forum_id):
            raise_not_found("Lead form", str(form_id))
        if not form.is_active:
            raise_bad_request("This form is no longer accepting submissions")
        return form

    async def record_view(
        self,
        form_id: uuid.UUID,
        referrer: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        forum_id: Optional[uuid.UUID] = None
    ) -> None:
        form = await self.form_repo.get(form_id)
        if not form or (forum_id and form.forum_id != forum_id):
            raise_not_found("Lead form", str(form_id))
        await self.view_repo.create({
            "form_id": form.id,
            "referrer": referrer,
            "ip_address": ip_address,
            "user_agent": user_agent,
        })

    async def submit(
        self,
        form_id: uuid.UUID,
        form_data: dict,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        forum_id: Optional[uuid.UUID] = None
    ) -> LeadSubmission:
        """Store a submission and count it as a converting view."""
        form = await self.get_active_form(form_id, forum_id)
        email, first_name, last_name = extract_contact(form_data)

        submission = await self.submission_repo.create({
            "form_id": form.id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "form_data": form_data,
            "ip_address": ip_address,
            "user_agent": user_agent,
        })
        await self.view_repo.create({
            "form_id": form.id,
            "is_conversion": True,
            "ip_address": ip_address,
            "user_agent": user_agent,
        })

        forum = await self.forum_repo.get(form.forum_id)
        if forum:
            await self.activity_repo.log(
                org_id=forum.org_id,
                action=Actions.LEAD_SUBMITTED,
                entity_type="lead_form",
                entity_id=form.id,
                meta_data={"submission_id": str(submission.id)},
                ip_address=ip_address,
                user_agent=user_agent
            )
        logger.info(f"Lead submission {submission.id} for form {form.id}")
        return submission

    def submission_result(self, form: LeadForm, submission: LeadSubmission) -> dict:
        return {
            "success": True,
            "submission_id": submission.id,
            "success_title": form.success_title,
            "success_message": form.success_message,
            "redirect_url": form.redirect_url,
        }

    # Owner views of submissions

    async def list_submissions(self, org_id: uuid.UUID, form_id: uuid.UUID) -> List[LeadSubmission]:
        form = await self._owned_form(org_id, form_id)
        return await self.submission_repo.list_for_form(form.id)

    async def recent_submissions(self, org_id: uuid.UUID) -> List[LeadSubmission]:
        forms = await self.list_for_org(org_id)
        return await self.submission_repo.recent_for_forms([f.id for f in forms], RECENT_SUBMISSIONS)

    async def export(self, user: User, form_id: uuid.UUID) -> Tuple[str, str]:
        """CSV of every submission of the form; the rows are then flagged as exported."""
        form = await self._owned_form(user.current_org_id, form_id)
        submissions = await self.submission_repo.list_for_form(form.id)

        extra_fields = []
        for field in form.form_fields or []:
            name = field.get("name")
            if name and name not in extra_fields:
                extra_fields.append(name)
        for submission in submissions:
            for key in submission.form_data or {}:
                if key not in extra_fields:
                    extra_fields.append(key)

        output = io.StringIO()
        fieldnames = ["email", "first_name", "last_name", "created_at"] + [
            f for f in extra_fields if f not in ("email", "first_name", "last_name", "created_at")
        ]
        writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()

        for submission in submissions:
            row = {key: value for key, value in (submission.form_data or {}).items()}
            row.update({
                "email": submission.email,
                "first_name": submission.first_name or "",
                "last_name": submission.last_name or "",
                "created_at": submission.created_at.isoformat(),
            })
            writer.writerow(row)

        await self.submission_repo.mark_exported(form.id)
        await self.activity_repo.log(
            org_id=user.current_org_id,
            actor_id=user.id,
            action=Actions.LEADS_EXPORTED,
            entity_type="lead_form",
            entity_id=form.id,
            meta_data={"count": len(submissions)}
        )
        filename = f"{form.name.lower().replace(' ', '_')}_submissions.csv"
        return filename, output.getvalue()

"""
Privacy service - AI provider consent and anonymized data exports.
"""
import csv
import io
import json
import uuid
import logging
from datetime import datetime
from typing import Optional, List, Tuple
from xml.etree import ElementTree

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from formai.config import settings
from formai.core.exceptions import raise_not_found, raise_forbidden, raise_conflict
from formai.repositories.forum_repo import ForumRepository
from formai.repositories.privacy_repo import ConsentRepository, DataExportRepository
from formai.repositories.activity_repo import ActivityLogRepository
from formai.models.forum import Forum
from formai.models.question import Question, Answer
from formai.models.privacy import ConsentRecord, DataExport
from formai.models.user import User
from formai.models.activity import Actions
from formai.schemas.privacy import ConsentRequest, DataExportCreate
from formai.services.anonymizer import Anonymizer

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "xml": "application/xml",
}
CSV_COLUMNS = ["type", "id", "parent_id", "title", "content", "is_ai_generated", "created_at"]


def render_export(export: DataExport, records: List[dict]) -> str:
    """Serialize collected records in the export's format."""
    if export.format == "csv":
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for record in records:
            writer.writerow({k: "" if v is None else v for k, v in record.items()})
        return output.getvalue()

    if export.format == "xml":
        root = ElementTree.Element("export", {
            "name": export.name,
            "provider": export.provider,
            "anonymization": export.anonymization_level,
        })
        for record in records:
            item = ElementTree.SubElement(root, record["type"], {"id": str(record["id"])})
            for key in CSV_COLUMNS[2:]:
                value = record.get(key)
                if value is not None:
                    ElementTree.SubElement(item, key).text = str(value)
        return ElementTree.tostring(root, encoding="unicode")

    return json.dumps({
        "export": {
            "name": export.name,
            "provider": export.provider,
            "anonymization_level": export.anonymization_level,
            "generated_at": datetime.utcnow().isoformat(),
        },
        "records": records,
    }, default=str, indent=2)


class PrivacyService:
    """Service for consent and data export operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.forum_repo = ForumRepository(session)
        self.consent_repo = ConsentRepository(session)
        self.export_repo = DataExportRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    # Consent

    async def grant_consent(self, user: User, consent_data: ConsentRequest) -> ConsentRecord:
        org_id = user.current_org_id
        record = await self.consent_repo.get_for(org_id, consent_data.provider, consent_data.consent_type)
        now = datetime.utcnow()
        if record:
            record.granted = True
            record.granted_at = now
            record.revoked_at = None
            record.consent_version = settings.CONSENT_VERSION
            record.data_scope = consent_data.data_scope
            record.updated_at = now
            record = await self.consent_repo.save(record)
        else:
            record = await self.consent_repo.create({
                "org_id": org_id,
                "provider": consent_data.provider,
                "consent_type": consent_data.consent_type,
                "granted": True,
                "granted_at": now,
                "consent_version": settings.CONSENT_VERSION,
                "data_scope": consent_data.data_scope,
            })

        await self.activity_repo.log(
            org_id=org_id,
            actor_id=user.id,
            action=Actions.CONSENT_GRANTED,
            entity_type="consent",
            entity_id=record.id,
            meta_data={"provider": record.provider, "consent_type": record.consent_type}
        )
        return record

    async def revoke_consent(self, user: User, provider: str, consent_type: str = "data_sharing") -> ConsentRecord:
        record = await self.consent_repo.get_for(user.current_org_id, provider, consent_type)
        if not record or not record.granted_at:
            raise_not_found("Consent")

        now = datetime.utcnow()
        record.granted = False
        record.revoked_at = now
        record.updated_at = now
        record = await self.consent_repo.save(record)

        await self.activity_repo.log(
            org_id=record.org_id,
            actor_id=user.id,
            action=Actions.CONSENT_REVOKED,
            entity_type="consent",
            entity_id=record.id,
            meta_data={"provider": provider, "consent_type": consent_type}
        )
        return record

    async def list_consents(self, org_id: uuid.UUID) -> List[ConsentRecord]:
        return await self.consent_repo.list(org_id, order_by="updated_at")

    async def consent_stats(self, org_id: uuid.UUID) -> dict:
        records = await self.consent_repo.list(org_id)
        providers = {}
        for record in records:
            entry = providers.setdefault(record.provider, {"granted": 0, "revoked": 0})
            entry["granted" if record.granted else "revoked"] += 1
        granted = sum(1 for r in records if r.granted)
        return {
            "total": len(records),
            "granted": granted,
            "revoked": len(records) - granted,
            "providers": providers,
        }

    # Exports

    async def create_export(self, user: User, export_data: DataExportCreate) -> DataExport:
        """Queue an export. Consent for the provider must be granted."""
        org_id = user.current_org_id
        if not await self.consent_repo.has_granted(org_id, export_data.provider):
            raise_forbidden(f"Consent for provider '{export_data.provider}' has not been granted")

        data = export_data.model_dump()
        data["org_id"] = org_id
        data["requested_by"] = user.id
        data["status"] = "pending"
        export = await self.export_repo.create(data)

        await self.activity_repo.log(
            org_id=org_id,
            actor_id=user.id,
            action=Actions.EXPORT_REQUESTED,
            entity_type="export",
            entity_id=export.id,
            meta_data={"provider": export.provider, "format": export.format}
        )
        return export

    async def list_exports(self, org_id: uuid.UUID, status: Optional[str] = None) -> List[DataExport]:
        return await self.export_repo.list_for_org(org_id, status)

    async def get_export(self, org_id: uuid.UUID, export_id: uuid.UUID) -> DataExport:
        export = await self.export_repo.get_owned(export_id, org_id)
        if not export:
            raise_not_found("Export", str(export_id))
        return export

    async def download(self, org_id: uuid.UUID, export_id: uuid.UUID) -> Tuple[str, str, str]:
        """Payload, media type and file name of a completed export."""
        export = await self.get_export(org_id, export_id)
        if export.status != "completed":
            raise_conflict(f"Export is {export.status}")
        filename = f"export_{export.id}.{export.format}"
        return export.payload or "", MEDIA_TYPES.get(export.format, "text/plain"), filename

    async def delete_export(self, org_id: uuid.UUID, export_id: uuid.UUID) -> None:
        export = await self.get_export(org_id, export_id)
        await self.export_repo.delete(export.id)

    async def collect_records(self, export: DataExport) -> List[dict]:
        """Organization content for the export, anonymized and bounded in size."""
        anonymizer = Anonymizer(export.anonymization_level, export.masked_keywords)
        forum_ids = await self.forum_repo.list_ids_for_org(export.org_id)
        budget = settings.EXPORT_MAX_RECORDS
        records = []

        if "forums" in export.content_types and forum_ids and budget > 0:
            forums = (await self.session.exec(
                select(Forum).where(Forum.id.in_(forum_ids)).order_by(Forum.created_at).limit(budget)
            )).all()
            for forum in forums:
                records.append(anonymizer.anonymize_record({
                    "type": "forum",
                    "id": forum.id,
                    "parent_id": None,
                    "title": forum.name,
                    "content": forum.description,
                    "is_ai_generated": False,
                    "created_at": forum.created_at,
                }, ["title", "content"]))
            budget -= len(forums)

        if "questions" in export.content_types and forum_ids and budget > 0:
            questions = (await self.session.exec(
                select(Question)
                .where(Question.forum_id.in_(forum_ids))
                .order_by(Question.created_at)
                .limit(budget)
            )).all()
            for question in questions:
                records.append(anonymizer.anonymize_record({
                    "type": "question",
                    "id": question.id,
                    "parent_id": question.forum_id,
                    "title": question.title,
                    "content": question.content,
                    "is_ai_generated": question.is_ai_generated,
                    "created_at": question.created_at,
                }, ["title", "content"]))
            budget -= len(questions)

        if "answers" in export.content_types and forum_ids and budget > 0:
            answers = (await self.session.exec(
                select(Answer)
                .join(Question, Answer.question_id == Question.id)
                .where(Question.forum_id.in_(forum_ids))
                .order_by(Answer.created_at)
                .limit(budget)
            )).all()
            for answer in answers:
                records.append(anonymizer.anonymize_record({
                    "type": "answer",
                    "id": answer.id,
                    "parent_id": answer.question_id,
                    "title": None,
                    "content": answer.content,
                    "is_ai_generated": answer.is_ai_generated,
                    "created_at": answer.created_at,
                }, ["content"]))

        return records

    async def process_export(self, export_id: uuid.UUID) -> Optional[DataExport]:
        """Build the payload; status goes pending -> processing -> completed or failed."""
        export = await self.export_repo.get(export_id)
        if not export:
            logger.error(f"Export {export_id} not found for processing")
            return None

        export.status = "processing"
        export = await self.export_repo.save(export)

        try:
            records = await self.collect_records(export)
            payload = render_export(export, records)
        except Exception as e:
            logger.error(f"Export {export.id} failed: {e}")
            export.status = "failed"
            export.error = str(e)
            export = await self.export_repo.save(export)
            await self.activity_repo.log(
                org_id=export.org_id,
                actor_id=export.requested_by,
                action=Actions.EXPORT_FAILED,
                entity_type="export",
                entity_id=export.id,
                meta_data={"error": export.error}
            )
            return export

        export.status = "completed"
        export.payload = payload
        export.record_count = len(records)
        export.file_size = len(payload.encode("utf-8"))
        export.completed_at = datetime.utcnow()
        export = await self.export_repo.save(export)

        await self.activity_repo.log(
            org_id=export.org_id,
            actor_id=export.requested_by,
            action=Actions.EXPORT_COMPLETED,
            entity_type="export",
            entity_id=export.id,
            meta_data={"records": export.record_count}
        )
        logger.info(f"Export {export.id} completed with {export.record_count} records")
        return export


async def run_export_task(export_id: uuid.UUID, session_factory) -> None:
    """Background task entry point with its own session."""
    async with session_factory() as session:
        await PrivacyService(session).process_export(export_id)

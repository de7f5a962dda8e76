"""
Tests for anonymization, AI provider consent and data exports.
"""
import csv
import io
from xml.etree import ElementTree

import pytest

from formai.services.anonymizer import Anonymizer


# =============================================================================
# Anonymizer
# =============================================================================

def test_basic_level_redacts_contact_details():
    text = "Email jo@acme.com or call 555-123-4567, see https://acme.com/help?id=12."
    assert Anonymizer("basic").anonymize(text) == "Email [REDACTED] or call [REDACTED], see [URL]"


def test_basic_level_keeps_names():
    assert Anonymizer("basic").anonymize("Jane Smith paid $50") == "Jane Smith paid $50"


def test_standard_level_redacts_names_and_business_info():
    text = "Jane Smith from Acme Corp paid $1,200.50 for order 98765."
    assert Anonymizer("standard").anonymize(text) == (
        "[REDACTED] from [REDACTED] paid [BUSINESS_INFO] for order [BUSINESS_INFO]."
    )


def test_strict_level_redacts_dates_and_times():
    text = "Launched on 2024-03-05 at 10:30 AM and again March 5, 2024."
    assert Anonymizer("strict").anonymize(text) == (
        "Launched on [TIMESTAMP] at [TIMESTAMP] and again [TIMESTAMP]."
    )


def test_masked_keywords_at_every_level():
    anonymizer = Anonymizer("basic", ["project falcon", " "])
    assert anonymizer.anonymize("Project Falcon ships soon") == "[KEYWORD] ships soon"


def test_anonymize_record_only_touches_listed_fields():
    record = {"title": "Mail jo@acme.com", "content": None, "author": "jo@acme.com"}
    cleaned = Anonymizer("basic").anonymize_record(record, ["title", "content"])

    assert cleaned == {"title": "Mail [REDACTED]", "content": None, "author": "jo@acme.com"}
    assert record["title"] == "Mail jo@acme.com"


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        Anonymizer("paranoid")


# =============================================================================
# Consent
# =============================================================================

@pytest.mark.asyncio
async def test_grant_and_revoke_consent(client, auth_headers):
    granted = await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "openai"})
    assert granted.status_code == 200
    assert granted.json()["granted"] is True
    assert granted.json()["consent_version"] == "1.0.0"

    again = await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "openai"})
    assert again.json()["id"] == granted.json()["id"]

    revoked = await client.delete("/api/privacy/consents/openai", headers=auth_headers)
    assert revoked.json()["granted"] is False
    assert revoked.json()["revoked_at"] is not None

    await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "anthropic"})
    stats = await client.get("/api/privacy/consents/stats", headers=auth_headers)
    assert stats.json() == {
        "total": 2,
        "granted": 1,
        "revoked": 1,
        "providers": {"openai": {"granted": 0, "revoked": 1}, "anthropic": {"granted": 1, "revoked": 0}},
    }


@pytest.mark.asyncio
async def test_revoke_unknown_consent(client, auth_headers):
    response = await client.delete("/api/privacy/consents/gemini", headers=auth_headers)
    assert response.status_code == 404


# =============================================================================
# Exports
# =============================================================================

@pytest.mark.asyncio
async def test_export_requires_consent(client, auth_headers):
    response = await client.post("/api/privacy/exports", headers=auth_headers, json={
        "name": "Training data",
        "provider": "openai",
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_json_export_is_anonymized(client, auth_headers, question):
    await client.post(f"/api/questions/{question['id']}/answers", headers=auth_headers, json={
        "content": "Email support@acme.com with your forum address and we will fix it.",
    })
    await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "openai"})

    created = await client.post("/api/privacy/exports", headers=auth_headers, json={
        "name": "Training data",
        "provider": "openai",
    })
    assert created.status_code == 202
    assert created.json()["status"] == "pending"
    export_id = created.json()["id"]

    export = await client.get(f"/api/privacy/exports/{export_id}", headers=auth_headers)
    assert export.json()["status"] == "completed"
    assert export.json()["record_count"] == 2
    assert export.json()["file_size"] > 0

    download = await client.get(f"/api/privacy/exports/{export_id}/download", headers=auth_headers)
    assert download.headers["content-type"].startswith("application/json")
    assert f"export_{export_id}.json" in download.headers["content-disposition"]

    payload = download.json()
    assert payload["export"]["provider"] == "openai"
    records = {r["type"]: r for r in payload["records"]}
    assert records["question"]["title"] == question["title"]
    assert records["answer"]["content"] == "Email [REDACTED] with your forum address and we will fix it."


@pytest.mark.asyncio
async def test_csv_export(client, auth_headers, forum, question):
    await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "gemini"})

    created = await client.post("/api/privacy/exports", headers=auth_headers, json={
        "name": "Forum list",
        "provider": "gemini",
        "format": "csv",
        "content_types": ["forums", "questions"],
        "anonymization_level": "basic",
    })
    download = await client.get(f"/api/privacy/exports/{created.json()['id']}/download", headers=auth_headers)

    rows = list(csv.DictReader(io.StringIO(download.text)))
    assert [row["type"] for row in rows] == ["forum", "question"]
    assert rows[0]["title"] == "Acme Help Community"
    assert rows[1]["parent_id"] == forum["id"]


@pytest.mark.asyncio
async def test_xml_export_masks_keywords(client, auth_headers, question):
    await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "openai"})

    created = await client.post("/api/privacy/exports", headers=auth_headers, json={
        "name": "Masked",
        "provider": "openai",
        "format": "xml",
        "content_types": ["questions"],
        "masked_keywords": ["CNAME"],
    })
    download = await client.get(f"/api/privacy/exports/{created.json()['id']}/download", headers=auth_headers)

    root = ElementTree.fromstring(download.text)
    assert root.tag == "export"
    assert root.get("provider") == "openai"
    item = root.find("question")
    assert item.get("id") == question["id"]
    assert "[KEYWORD]" in item.find("content").text


@pytest.mark.asyncio
async def test_list_and_delete_exports(client, auth_headers, other_headers):
    await client.post("/api/privacy/consents", headers=auth_headers, json={"provider": "openai"})
    created = await client.post("/api/privacy/exports", headers=auth_headers, json={
        "name": "Empty export",
        "provider": "openai",
    })
    export_id = created.json()["id"]

    completed = await client.get("/api/privacy/exports", headers=auth_headers, params={"status": "completed"})
    failed = await client.get("/api/privacy/exports", headers=auth_headers, params={"status": "failed"})
    assert [e["id"] for e in completed.json()] == [export_id]
    assert failed.json() == []

    foreign = await client.get(f"/api/privacy/exports/{export_id}", headers=other_headers)
    assert foreign.status_code == 404

    deleted = await client.delete(f"/api/privacy/exports/{export_id}", headers=auth_headers)
    assert deleted.status_code == 204
    assert (await client.get("/api/privacy/exports", headers=auth_headers)).json() == []

"""
Tests for lead forms, public submissions and CSV export.
"""
import csv
import io

import pytest

from formai.core.exceptions import ValidationError
from formai.services.lead_service import extract_contact, conversion_rate


def test_extract_contact_matches_key_fragments():
    email, first, last = extract_contact({
        "Work Email": " jo@acme.com ",
        "firstName": "Jo",
        "last_name": "Doe",
    })
    assert (email, first, last) == ("jo@acme.com", "Jo", "Doe")


def test_extract_contact_requires_email():
    with pytest.raises(ValidationError) as exc_info:
        extract_contact({"first_name": "Jo"})
    assert exc_info.value.status_code == 422


def test_conversion_rate():
    assert conversion_rate(0, 0) == 0.0
    assert conversion_rate(3, 1) == 33.3


@pytest.fixture
async def lead_form(client, auth_headers, forum):
    response = await client.post("/api/lead-forms/", headers=auth_headers, json={
        "forum_id": forum["id"],
        "name": "Newsletter signup",
        "form_fields": [
            {"name": "email", "label": "Email", "type": "email", "required": True},
            {"name": "first_name", "label": "First name"},
            {"name": "company", "label": "Company"},
        ],
        "redirect_url": "",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_form_defaults(client, lead_form):
    assert lead_form["is_active"] is True
    assert lead_form["form_type"] == "inline"
    assert lead_form["redirect_url"] is None
    assert lead_form["success_title"] == "Thank you!"


@pytest.mark.asyncio
async def test_create_form_rejects_bad_redirect(client, auth_headers, forum):
    response = await client.post("/api/lead-forms/", headers=auth_headers, json={
        "forum_id": forum["id"],
        "name": "Broken form",
        "redirect_url": "not a url",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_form_in_foreign_forum(client, forum, other_headers):
    response = await client.post("/api/lead-forms/", headers=other_headers, json={
        "forum_id": forum["id"],
        "name": "Sneaky form",
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_submit_and_stats(client, auth_headers, lead_form):
    view = await client.post(f"/api/lead-forms/{lead_form['id']}/view", json={"referrer": "https://google.com"})
    assert view.json() == {"message": "View recorded"}

    response = await client.post(f"/api/lead-forms/{lead_form['id']}/submissions", json={
        "form_data": {"email": "lead@example.com", "first_name": "Jo", "company": "Initech"},
    })

    assert response.status_code == 201
    result = response.json()
    assert result["success"] is True
    assert result["success_message"] == "Your submission has been received."

    detail = await client.get(f"/api/lead-forms/{lead_form['id']}", headers=auth_headers)
    assert detail.json()["stats"] == {"views": 2, "submissions": 1, "conversion_rate": 50.0}

    submissions = await client.get(f"/api/lead-forms/{lead_form['id']}/submissions", headers=auth_headers)
    assert submissions.json()[0]["email"] == "lead@example.com"
    assert submissions.json()[0]["first_name"] == "Jo"

    recent = await client.get("/api/lead-forms/recent-submissions", headers=auth_headers)
    assert len(recent.json()) == 1


@pytest.mark.asyncio
async def test_submit_without_email(client, lead_form):
    response = await client.post(f"/api/lead-forms/{lead_form['id']}/submissions", json={
        "form_data": {"first_name": "Jo"},
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_inactive_form_rejects_submissions(client, auth_headers, lead_form):
    await client.patch(f"/api/lead-forms/{lead_form['id']}", headers=auth_headers, json={"is_active": False})

    response = await client.post(f"/api/lead-forms/{lead_form['id']}/submissions", json={
        "form_data": {"email": "late@example.com"},
    })

    assert response.status_code == 400
    assert "no longer accepting" in response.json()["detail"]


@pytest.mark.asyncio
async def test_export_csv(client, auth_headers, lead_form):
    await client.post(f"/api/lead-forms/{lead_form['id']}/submissions", json={
        "form_data": {"email": "a@example.com", "first_name": "Ann", "company": "Initech"},
    })
    await client.post(f"/api/lead-forms/{lead_form['id']}/submissions", json={
        "form_data": {"email": "b@example.com", "newsletter": "yes"},
    })

    response = await client.get(f"/api/lead-forms/{lead_form['id']}/export", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "newsletter_signup_submissions.csv" in response.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert list(rows[0].keys()) == ["email", "first_name", "last_name", "created_at", "company", "newsletter"]
    assert {row["email"] for row in rows} == {"a@example.com", "b@example.com"}

    submissions = await client.get(f"/api/lead-forms/{lead_form['id']}/submissions", headers=auth_headers)
    assert all(s["is_exported"] for s in submissions.json())


@pytest.mark.asyncio
async def test_list_and_delete_forms(client, auth_headers, forum, lead_form, other_headers):
    by_forum = await client.get("/api/lead-forms/", headers=auth_headers, params={"forum_id": forum["id"]})
    mine = await client.get("/api/lead-forms/mine", headers=auth_headers)
    theirs = await client.get("/api/lead-forms/mine", headers=other_headers)

    assert [f["id"] for f in by_forum.json()] == [lead_form["id"]]
    assert [f["id"] for f in mine.json()] == [lead_form["id"]]
    assert theirs.json() == []

    deleted = await client.delete(f"/api/lead-forms/{lead_form['id']}", headers=auth_headers)
    assert deleted.status_code == 204
    assert (await client.get(f"/api/lead-forms/{lead_form['id']}", headers=auth_headers)).status_code == 404

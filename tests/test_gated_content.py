"""
Tests for gated content: teasers, unlocking and owner management.
"""
import pytest


def gated_payload(forum_id, **overrides):
    payload = {
        "forum_id": forum_id,
        "title": "Custom Domain Checklist",
        "slug": "custom-domain-checklist",
        "description": "Everything to check before switching domains",
        "teaser": "Ten steps most teams forget.",
        "content": "1. Lower your DNS TTL a day ahead. 2. Add the CNAME record.",
        "download_url": "https://acme.com/files/checklist.pdf",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def gated(client, auth_headers, forum):
    response = await client.post("/api/gated-content/", headers=auth_headers, json=gated_payload(forum["id"]))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_public_teaser_hides_body(client, forum, gated):
    listed = await client.get(f"/api/gated-content/public/{forum['id']}")
    single = await client.get(f"/api/gated-content/public/item/{gated['id']}")

    assert [item["id"] for item in listed.json()] == [gated["id"]]
    for data in (listed.json()[0], single.json()):
        assert data["teaser"] == "Ten steps most teams forget."
        assert "content" not in data
        assert "download_url" not in data


@pytest.mark.asyncio
async def test_inactive_content_not_public(client, auth_headers, forum, gated):
    await client.patch(f"/api/gated-content/{gated['id']}", headers=auth_headers, json={"is_active": False})

    listed = await client.get(f"/api/gated-content/public/{forum['id']}")
    single = await client.get(f"/api/gated-content/public/item/{gated['id']}")

    assert listed.json() == []
    assert single.status_code == 404


@pytest.mark.asyncio
async def test_unlock_without_form_requires_email(client, gated):
    missing = await client.post(f"/api/gated-content/{gated['id']}/unlock", json={"form_data": {"name": "Jo"}})
    assert missing.status_code == 422

    response = await client.post(f"/api/gated-content/{gated['id']}/unlock", json={
        "form_data": {"email": "jo@example.com"},
    })
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["submission_id"] is None
    assert data["content"]["content"].startswith("1. Lower your DNS TTL")
    assert data["content"]["download_url"] == "https://acme.com/files/checklist.pdf"


@pytest.mark.asyncio
async def test_unlock_with_form_stores_submission(client, auth_headers, forum):
    form = await client.post("/api/lead-forms/", headers=auth_headers, json={
        "forum_id": forum["id"],
        "name": "Checklist download",
        "form_type": "gated",
    })
    gated = await client.post("/api/gated-content/", headers=auth_headers, json=gated_payload(
        forum["id"], form_id=form.json()["id"]
    ))

    response = await client.post(f"/api/gated-content/{gated.json()['id']}/unlock", json={
        "form_data": {"email": "jo@example.com", "first_name": "Jo"},
    })

    assert response.status_code == 200
    assert response.json()["submission_id"]

    submissions = await client.get(f"/api/lead-forms/{form.json()['id']}/submissions", headers=auth_headers)
    assert [s["email"] for s in submissions.json()] == ["jo@example.com"]


@pytest.mark.asyncio
async def test_form_must_belong_to_same_forum(client, auth_headers, forum):
    other_forum = await client.post("/api/forums/", headers=auth_headers, json={"name": "Second forum"})
    form = await client.post("/api/lead-forms/", headers=auth_headers, json={
        "forum_id": other_forum.json()["id"],
        "name": "Elsewhere",
    })

    response = await client.post("/api/gated-content/", headers=auth_headers, json=gated_payload(
        forum["id"], form_id=form.json()["id"]
    ))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_slug_rejected(client, auth_headers, forum, gated):
    response = await client.post("/api/gated-content/", headers=auth_headers, json=gated_payload(forum["id"]))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_owner_management(client, auth_headers, forum, gated, other_headers):
    listed = await client.get("/api/gated-content/", headers=auth_headers, params={"forum_id": forum["id"]})
    assert listed.json()[0]["content"]

    foreign = await client.get(f"/api/gated-content/{gated['id']}", headers=other_headers)
    assert foreign.status_code == 404

    updated = await client.patch(f"/api/gated-content/{gated['id']}", headers=auth_headers, json={
        "title": "Domain Switch Checklist",
    })
    assert updated.json()["title"] == "Domain Switch Checklist"

    deleted = await client.delete(f"/api/gated-content/{gated['id']}", headers=auth_headers)
    assert deleted.status_code == 204
    assert (await client.get(f"/api/gated-content/{gated['id']}", headers=auth_headers)).status_code == 404

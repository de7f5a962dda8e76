"""
Tests for forum management, public lookups, domains and categories.
"""
import pytest


@pytest.mark.asyncio
async def test_create_forum_derives_slug_and_api_key(client, auth_headers):
    response = await client.post("/api/forums/", headers=auth_headers, json={"name": "Acme Help Community"})

    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "acme-help-community"
    assert data["api_key"].startswith("fai_")
    assert data["theme_color"] == "#3B82F6"
    assert data["is_public"] is True


@pytest.mark.asyncio
async def test_duplicate_slug_gets_suffix(client, auth_headers, forum):
    response = await client.post("/api/forums/", headers=auth_headers, json={"name": "Acme Help Community"})

    assert response.status_code == 201
    slug = response.json()["slug"]
    assert slug != forum["slug"]
    assert slug.startswith("acme-help-community-")


@pytest.mark.asyncio
async def test_explicit_duplicate_slug_rejected(client, auth_headers, forum):
    response = await client.post("/api/forums/", headers=auth_headers, json={
        "name": "Another forum",
        "slug": forum["slug"],
    })
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_forum_validates_fields(client, auth_headers):
    bad_color = await client.post("/api/forums/", headers=auth_headers, json={"name": "Acme", "theme_color": "blue"})
    bad_url = await client.post("/api/forums/", headers=auth_headers, json={"name": "Acme", "main_website_url": "acme"})
    short_name = await client.post("/api/forums/", headers=auth_headers, json={"name": "A"})

    assert bad_color.status_code == 422
    assert bad_url.status_code == 422
    assert short_name.status_code == 422


@pytest.mark.asyncio
async def test_list_forums_includes_totals(client, auth_headers, forum, question):
    response = await client.get("/api/forums/", headers=auth_headers)

    assert response.status_code == 200
    forums = response.json()
    assert len(forums) == 1
    assert forums[0]["id"] == forum["id"]
    assert forums[0]["question_count"] == 1
    assert forums[0]["answer_count"] == 0


@pytest.mark.asyncio
async def test_other_org_cannot_see_forum(client, forum, other_headers):
    get_response = await client.get(f"/api/forums/{forum['id']}", headers=other_headers)
    patch_response = await client.patch(f"/api/forums/{forum['id']}", headers=other_headers, json={"name": "Hijacked"})
    list_response = await client.get("/api/forums/", headers=other_headers)

    assert get_response.status_code == 404
    assert patch_response.status_code == 404
    assert list_response.json() == []


@pytest.mark.asyncio
async def test_update_forum(client, auth_headers, forum):
    response = await client.patch(f"/api/forums/{forum['id']}", headers=auth_headers, json={
        "description": "Updated description",
        "theme_color": "#111111",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["description"] == "Updated description"
    assert data["theme_color"] == "#111111"
    assert data["name"] == forum["name"]


@pytest.mark.asyncio
async def test_public_lookup_by_slug_hides_api_key(client, forum):
    response = await client.get(f"/api/forums/by-slug/{forum['slug']}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == forum["id"]
    assert "api_key" not in data


@pytest.mark.asyncio
async def test_private_forum_not_publicly_visible(client, auth_headers, forum):
    await client.patch(f"/api/forums/{forum['id']}", headers=auth_headers, json={"is_public": False})

    response = await client.get(f"/api/forums/by-slug/{forum['slug']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_domain_update_and_lookup(client, auth_headers, forum):
    response = await client.patch(f"/api/forums/{forum['id']}/domain", headers=auth_headers, json={
        "subdomain": "acme",
        "custom_domain": "https://Community.Acme.com/",
    })

    assert response.status_code == 200
    assert response.json()["custom_domain"] == "community.acme.com"

    by_subdomain = await client.get("/api/forums/by-subdomain/ACME")
    by_domain = await client.get("/api/forums/by-domain/community.acme.com")
    assert by_subdomain.json()["id"] == forum["id"]
    assert by_domain.json()["id"] == forum["id"]

    cleared = await client.patch(f"/api/forums/{forum['id']}/domain", headers=auth_headers, json={"subdomain": None})
    assert cleared.json()["subdomain"] is None
    assert cleared.json()["custom_domain"] == "community.acme.com"


@pytest.mark.asyncio
async def test_subdomain_must_be_unique(client, auth_headers, forum):
    second = await client.post("/api/forums/", headers=auth_headers, json={"name": "Second forum"})
    await client.patch(f"/api/forums/{forum['id']}/domain", headers=auth_headers, json={"subdomain": "acme"})

    response = await client.patch(
        f"/api/forums/{second.json()['id']}/domain", headers=auth_headers, json={"subdomain": "acme"}
    )

    assert response.status_code == 400
    assert "already taken" in response.json()["detail"]


@pytest.mark.asyncio
async def test_rotate_api_key(client, auth_headers, forum):
    response = await client.post(f"/api/forums/{forum['id']}/api-key", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["api_key"] != forum["api_key"]


@pytest.mark.asyncio
async def test_domain_verification_flow(client, auth_headers, forum):
    start = await client.post(
        f"/api/forums/{forum['id']}/domain-verification",
        headers=auth_headers,
        json={"domain": "help.acme.com"},
    )
    assert start.status_code == 200
    data = start.json()
    assert data["is_verified"] is False
    assert data["record_type"] == "TXT"
    assert data["record_name"] == "_formai-verification.help.acme.com"

    wrong = await client.post(
        f"/api/forums/{forum['id']}/domain-verification/check",
        headers=auth_headers,
        json={"domain": "help.acme.com", "token": "nope"},
    )
    assert wrong.status_code == 400

    check = await client.post(
        f"/api/forums/{forum['id']}/domain-verification/check",
        headers=auth_headers,
        json={"domain": "help.acme.com", "token": data["verification_token"]},
    )
    assert check.status_code == 200
    assert check.json()["is_verified"] is True

    forum_response = await client.get(f"/api/forums/{forum['id']}", headers=auth_headers)
    assert forum_response.json()["custom_domain"] == "help.acme.com"


@pytest.mark.asyncio
async def test_forum_stats(client, auth_headers, forum, question):
    await client.post(f"/api/questions/{question['id']}/answers", headers=auth_headers, json={
        "content": "Point the CNAME at forums.formai.app and wait for DNS to propagate.",
    })

    response = await client.get(f"/api/forums/{forum['id']}/stats", headers=auth_headers)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_questions"] == 1
    assert stats["total_answers"] == 1
    assert stats["ai_answers"] == 0
    assert stats["unanswered_questions"] == 0


@pytest.mark.asyncio
async def test_categories(client, auth_headers, forum):
    created = await client.post(f"/api/forums/{forum['id']}/categories", headers=auth_headers, json={
        "name": "Billing & Plans",
    })
    assert created.status_code == 201
    category = created.json()
    assert category["slug"] == "billing-plans"

    duplicate = await client.post(f"/api/forums/{forum['id']}/categories", headers=auth_headers, json={
        "name": "Billing Plans",
        "slug": "billing-plans",
    })
    assert duplicate.status_code == 400

    question = await client.post(f"/api/forums/{forum['id']}/questions", headers=auth_headers, json={
        "title": "How do I change my plan?",
        "content": "I want to move from monthly to yearly billing.",
        "category_id": category["id"],
    })
    assert question.status_code == 201

    listed = await client.get(f"/api/forums/{forum['id']}/categories")
    assert [c["name"] for c in listed.json()] == ["Billing & Plans"]

    deleted = await client.delete(f"/api/forums/{forum['id']}/categories/{category['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    fetched = await client.get(f"/api/questions/{question.json()['id']}")
    assert fetched.json()["category_id"] is None


@pytest.mark.asyncio
async def test_delete_forum_removes_content(client, auth_headers, forum, question):
    response = await client.delete(f"/api/forums/{forum['id']}", headers=auth_headers)
    assert response.status_code == 204

    assert (await client.get(f"/api/forums/{forum['id']}", headers=auth_headers)).status_code == 404
    assert (await client.get(f"/api/questions/{question['id']}")).status_code == 404

"""
Tests for main-site pages, interlinks and relevance scoring.
"""
import json
import uuid

import pytest

from formai.services.interlink_service import calculate_relevance, significant_words


# =============================================================================
# Relevance scoring
# =============================================================================

def test_significant_words_ignores_short_words():
    assert significant_words("How do I add a custom domain?") == {"custom", "domain"}


def test_relevance_title_containment_bonus():
    assert calculate_relevance("Custom domains", "", "Custom domains guide", "") == 100


def test_relevance_repeated_words_count_once():
    assert calculate_relevance("domain domain setup", "", "domain guide", "") == 40


def test_relevance_unrelated_content():
    assert calculate_relevance("Billing plans", "", "Custom domain", "") == 0


def test_relevance_empty_content():
    assert calculate_relevance("", "", "Custom domain", "Setting one up") == 0


# =============================================================================
# API
# =============================================================================

@pytest.fixture
async def page(client, auth_headers):
    response = await client.post("/api/interlinks/pages", headers=auth_headers, json={
        "title": "Custom domain setup",
        "slug": "custom-domain-setup",
        "content": "Connect a custom domain by adding a CNAME record for your forum.",
        "url": "https://acme.com/docs/custom-domain",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_page_crud(client, auth_headers, page, other_headers):
    by_slug = await client.get("/api/interlinks/pages/by-slug/custom-domain-setup", headers=auth_headers)
    assert by_slug.json()["id"] == page["id"]

    duplicate = await client.post("/api/interlinks/pages", headers=auth_headers, json={
        "title": "Another page", "slug": "custom-domain-setup",
    })
    assert duplicate.status_code == 400

    updated = await client.patch(f"/api/interlinks/pages/{page['id']}", headers=auth_headers, json={
        "meta_description": "How to use your own domain",
    })
    assert updated.json()["meta_description"] == "How to use your own domain"
    assert updated.json()["title"] == "Custom domain setup"

    foreign = await client.get(f"/api/interlinks/pages/{page['id']}", headers=other_headers)
    assert foreign.status_code == 404

    deleted = await client.delete(f"/api/interlinks/pages/{page['id']}", headers=auth_headers)
    assert deleted.status_code == 204
    assert (await client.get("/api/interlinks/pages", headers=auth_headers)).json() == []


@pytest.mark.asyncio
async def test_create_link_and_list(client, auth_headers, forum, question, page):
    response = await client.post("/api/interlinks/", headers=auth_headers, json={
        "source_type": "question",
        "source_id": question["id"],
        "target_type": "main_page",
        "target_id": page["id"],
        "anchor_text": "custom domain guide",
        "relevance_score": 80,
    })

    assert response.status_code == 201
    link = response.json()
    assert link["forum_id"] == forum["id"]

    by_source = await client.get(f"/api/interlinks/source/question/{question['id']}", headers=auth_headers)
    by_target = await client.get(f"/api/interlinks/target/main_page/{page['id']}", headers=auth_headers)
    by_forum = await client.get(f"/api/interlinks/forum/{forum['id']}", headers=auth_headers)
    assert [l["id"] for l in by_source.json()] == [link["id"]]
    assert [l["id"] for l in by_target.json()] == [link["id"]]
    assert [l["id"] for l in by_forum.json()] == [link["id"]]

    duplicate = await client.post("/api/interlinks/", headers=auth_headers, json={
        "source_type": "question",
        "source_id": question["id"],
        "target_type": "main_page",
        "target_id": page["id"],
        "anchor_text": "again",
    })
    assert duplicate.status_code == 400

    deleted = await client.delete(f"/api/interlinks/{link['id']}", headers=auth_headers)
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_self_link_rejected(client, auth_headers, question):
    response = await client.post("/api/interlinks/", headers=auth_headers, json={
        "source_type": "question",
        "source_id": question["id"],
        "target_type": "question",
        "target_id": question["id"],
        "anchor_text": "itself",
    })
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_link_to_unknown_content_is_404(client, auth_headers, question):
    response = await client.post("/api/interlinks/", headers=auth_headers, json={
        "source_type": "question",
        "source_id": question["id"],
        "target_type": "main_page",
        "target_id": str(uuid.uuid4()),
        "anchor_text": "missing",
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_relevant_content(client, auth_headers, question, page):
    await client.post("/api/interlinks/pages", headers=auth_headers, json={
        "title": "Pricing",
        "slug": "pricing",
        "content": "Monthly and yearly billing plans.",
    })

    response = await client.get(f"/api/interlinks/relevant/question/{question['id']}", headers=auth_headers)

    assert response.status_code == 200
    results = response.json()
    assert len(results) == 1
    assert results[0]["content_id"] == page["id"]
    assert results[0]["content_type"] == "main_page"
    assert results[0]["relevance_score"] == 60


@pytest.mark.asyncio
async def test_ai_suggestions_filter_unknown_ids(client, auth_headers, question, page, fake_ai):
    fake_ai.queue(json.dumps({"suggestions": [
        {"contentId": page["id"], "contentType": "main_page", "title": page["title"],
         "anchorText": "set up a custom domain", "relevanceScore": 90, "reason": "Same topic"},
        {"contentId": str(uuid.uuid4()), "contentType": "main_page", "title": "Invented",
         "anchorText": "invented page", "relevanceScore": 95},
        {"contentId": page["id"], "contentType": "main_page", "title": page["title"],
         "anchorText": "weak link", "relevanceScore": 20},
    ]}))

    response = await client.get("/api/interlinks/suggestions", headers=auth_headers, params={
        "content_type": "question",
        "content_id": question["id"],
    })

    assert response.status_code == 200
    suggestions = response.json()["suggestions"]
    assert len(suggestions) == 1
    assert suggestions[0]["anchor_text"] == "set up a custom domain"
    assert suggestions[0]["relevance_score"] == 90


@pytest.mark.asyncio
async def test_interlink_stats(client, auth_headers, question, page):
    await client.post("/api/interlinks/", headers=auth_headers, json={
        "source_type": "question", "source_id": question["id"],
        "target_type": "main_page", "target_id": page["id"],
        "anchor_text": "guide", "relevance_score": 80, "automatic": True,
    })
    await client.post("/api/interlinks/", headers=auth_headers, json={
        "source_type": "main_page", "source_id": page["id"],
        "target_type": "question", "target_id": question["id"],
        "anchor_text": "community question", "relevance_score": 60,
    })

    response = await client.get("/api/interlinks/stats", headers=auth_headers)

    stats = response.json()
    assert stats["total"] == 2
    assert stats["automatic"] == 1
    assert stats["manual"] == 1
    assert stats["average_relevance"] == 70
    assert stats["link_types"] == {"question to main_page": 1, "main_page to question": 1}
    assert sum(m["count"] for m in stats["monthly_growth"]) == 2


@pytest.mark.asyncio
async def test_deleting_content_removes_its_links(client, auth_headers, question, page):
    answer = await client.post(f"/api/questions/{question['id']}/answers", headers=auth_headers, json={
        "content": "Point the CNAME at your forum subdomain and wait for DNS to update.",
    })
    answer_id = answer.json()["id"]
    for source_type, source_id, target_type, target_id in [
        ("question", question["id"], "main_page", page["id"]),
        ("main_page", page["id"], "answer", answer_id),
    ]:
        created = await client.post("/api/interlinks/", headers=auth_headers, json={
            "source_type": source_type, "source_id": source_id,
            "target_type": target_type, "target_id": target_id,
            "anchor_text": "related", "relevance_score": 70,
        })
        assert created.status_code == 201, created.text

    await client.delete(f"/api/answers/{answer_id}", headers=auth_headers)
    assert (await client.get("/api/interlinks/stats", headers=auth_headers)).json()["total"] == 1

    await client.delete(f"/api/questions/{question['id']}", headers=auth_headers)
    assert (await client.get("/api/interlinks/stats", headers=auth_headers)).json()["total"] == 0

"""
Tests for the embed API used by widgets and the client SDK.
"""
import uuid
from datetime import datetime, timedelta
from urllib.parse import urlparse, parse_qs

import pytest

from formai.models.question import Question


def key_headers(forum):
    return {"X-API-Key": forum["api_key"]}


@pytest.mark.asyncio
async def test_version(client):
    response = await client.get("/api/embed/version")

    assert response.status_code == 200
    assert response.json()["version"] == "1.0.0"
    assert response.json()["api"] == "FormAI Embed API"


@pytest.mark.asyncio
async def test_forum_info_is_camel_case(client, forum, question):
    response = await client.get(f"/api/embed/forum/{forum['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Acme Help Community"
    assert data["totalQuestions"] == 1
    assert data["totalAnswers"] == 0
    assert "themeColor" in data
    assert "apiKey" not in data
    assert "api_key" not in data


@pytest.mark.asyncio
async def test_private_forum_needs_valid_key(client, auth_headers, forum):
    await client.patch(f"/api/forums/{forum['id']}", headers=auth_headers, json={"is_public": False})

    missing = await client.get("/api/embed/questions", params={"forumId": forum["id"]})
    wrong = await client.get("/api/embed/questions", params={"forumId": forum["id"]}, headers={"X-API-Key": "fai_nope"})
    right = await client.get("/api/embed/questions", params={"forumId": forum["id"]}, headers=key_headers(forum))

    assert missing.status_code == 401
    assert wrong.status_code == 403
    assert right.status_code == 200


@pytest.mark.asyncio
async def test_unknown_forum(client):
    response = await client.get("/api/embed/questions", params={"forumId": "00000000-0000-0000-0000-000000000000"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_questions(client, forum, question):
    response = await client.get("/api/embed/questions", params={"forumId": forum["id"], "type": "popular"})

    data = response.json()
    assert data["forumSlug"] == forum["slug"]
    assert [q["id"] for q in data["questions"]] == [question["id"]]
    assert data["questions"][0]["answerCount"] == 0
    assert data["questions"][0]["forumId"] == forum["id"]


@pytest.mark.asyncio
async def test_popular_questions_all_time(client, session, forum, question):
    stored = await session.get(Question, uuid.UUID(question["id"]))
    stored.created_at = datetime.utcnow() - timedelta(days=90)
    session.add(stored)
    await session.commit()
    params = {"forumId": forum["id"], "type": "popular"}

    last_month = await client.get("/api/embed/questions", params={**params, "timeFrame": 30})
    all_time = await client.get("/api/embed/questions", params={**params, "timeFrame": 0})

    assert last_month.json()["questions"] == []
    assert all_time.status_code == 200
    assert [q["id"] for q in all_time.json()["questions"]] == [question["id"]]


@pytest.mark.asyncio
async def test_search_and_categories(client, auth_headers, forum, question):
    await client.post(f"/api/forums/{forum['id']}/categories", headers=auth_headers, json={"name": "Domains"})

    results = await client.get("/api/embed/search", params={"forumId": forum["id"], "q": "custom domain"})
    categories = await client.get("/api/embed/categories", params={"forumId": forum["id"]})

    assert [q["title"] for q in results.json()["results"]] == [question["title"]]
    assert [c["name"] for c in categories.json()["categories"]] == ["Domains"]
    assert "forumId" in categories.json()["categories"][0]


@pytest.mark.asyncio
async def test_writes_require_api_key(client, forum):
    payload = {
        "title": "Can I use two domains?",
        "content": "We own both the .com and the .io and want both to work.",
    }

    missing = await client.post("/api/embed/questions", params={"forumId": forum["id"]}, json=payload)
    assert missing.status_code == 401

    created = await client.post("/api/embed/questions", params={"forumId": forum["id"]}, json=payload, headers=key_headers(forum))
    assert created.status_code == 201
    assert created.json()["authorName"] == "Anonymous"
    assert created.json()["source"] == "embed"


@pytest.mark.asyncio
async def test_ask_answer_and_vote(client, forum):
    headers = key_headers(forum)
    params = {"forumId": forum["id"]}

    question = await client.post("/api/embed/questions", params=params, headers=headers, json={
        "title": "Does the widget work with SPAs?",
        "content": "Our marketing site is a React single page application.",
        "authorName": "Pat",
    })
    question_id = question.json()["id"]
    assert question.json()["authorName"] == "Pat"

    answer = await client.post(f"/api/embed/questions/{question_id}/answers", params=params, headers=headers, json={
        "content": "Yes, mount it after the route renders and it picks up the container.",
        "author_name": "Sam",
    })
    assert answer.status_code == 201
    answer_id = answer.json()["id"]

    up = await client.post(f"/api/embed/answers/{answer_id}/vote", params=params, headers=headers, json={"isUpvote": True})
    assert up.json() == {"answerId": answer_id, "isUpvote": True, "score": 1}

    down = await client.post(f"/api/embed/answers/{answer_id}/vote", params=params, headers=headers, json={"isUpvote": False})
    assert down.json()["score"] == -1

    detail = await client.get(f"/api/embed/questions/{question_id}", params=params)
    answers = await client.get(f"/api/embed/questions/{question_id}/answers", params=params)
    assert detail.json()["title"] == "Does the widget work with SPAs?"
    assert answers.json()["answers"][0]["authorName"] == "Sam"
    assert answers.json()["answers"][0]["score"] == -1


@pytest.mark.asyncio
async def test_question_from_other_forum_is_404(client, auth_headers, forum, question):
    other = await client.post("/api/forums/", headers=auth_headers, json={"name": "Second forum"})

    response = await client.get(f"/api/embed/questions/{question['id']}", params={"forumId": other.json()["id"]})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_answer_preview(client, auth_headers, forum, fake_ai):
    await client.post("/api/ai-personas/", headers=auth_headers, json={
        "name": "Newbie Nora",
        "type": "beginner",
        "description": "Just set up her first forum last month",
        "personality": "curious",
        "tone": "friendly",
    })
    fake_ai.queue("I had the same problem, clearing the cache fixed it.")

    response = await client.post("/api/embed/ai/answer-preview", params={"forumId": forum["id"]}, headers=key_headers(forum), json={
        "questionTitle": "Why does my forum look stale?",
        "personaType": "beginner",
    })

    assert response.status_code == 200
    assert response.json() == {
        "answer": "I had the same problem, clearing the cache fixed it.",
        "personaType": "beginner",
        "personaName": "Newbie Nora",
    }


@pytest.mark.asyncio
async def test_answer_preview_without_key(client, forum, fake_ai):
    fake_ai.queue("Check the DNS record first.")

    response = await client.post("/api/embed/ai/answer-preview", params={"forumId": forum["id"]}, json={
        "questionTitle": "Why does my domain not resolve?",
    })

    assert response.status_code == 200
    assert response.json()["answer"] == "Check the DNS record first."


@pytest.mark.asyncio
async def test_answer_preview_failure_is_502(client, forum, fake_ai):
    fake_ai.queue(RuntimeError("provider down"))

    response = await client.post("/api/embed/ai/answer-preview", params={"forumId": forum["id"]}, headers=key_headers(forum), json={
        "questionTitle": "Why does my forum look stale?",
    })

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_lead_capture_through_embed(client, auth_headers, forum):
    form = await client.post("/api/lead-forms/", headers=auth_headers, json={
        "forum_id": forum["id"],
        "name": "Demo request",
    })
    form_id = form.json()["id"]
    params = {"forumId": forum["id"]}

    definition = await client.get(f"/api/embed/lead-form/{form_id}", params=params)
    assert definition.json()["name"] == "Demo request"
    assert "formFields" in definition.json()

    tracked = await client.post("/api/embed/track-form-view", params=params, json={"formId": form_id})
    assert tracked.json() == {"success": True}

    submitted = await client.post("/api/embed/lead-form-submit", params=params, json={
        "formId": form_id,
        "formData": {"email": "pat@example.com"},
    })
    assert submitted.status_code == 201
    assert submitted.json()["success"] is True
    assert submitted.json()["submissionId"]

    detail = await client.get(f"/api/lead-forms/{form_id}", headers=auth_headers)
    assert detail.json()["stats"]["submissions"] == 1
    assert detail.json()["stats"]["views"] == 3


@pytest.mark.asyncio
async def test_lead_form_from_other_forum_is_404(client, auth_headers, forum):
    other = await client.post("/api/forums/", headers=auth_headers, json={"name": "Second forum"})
    form = await client.post("/api/lead-forms/", headers=auth_headers, json={
        "forum_id": other.json()["id"],
        "name": "Elsewhere",
    })

    response = await client.get(f"/api/embed/lead-form/{form.json()['id']}", params={"forumId": forum["id"]})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_redirect_to_question_with_utm(client, auth_headers, forum, question):
    response = await client.get(f"/api/embed/redirect/{forum['id']}", params={
        "dest": "question",
        "id": question["id"],
        "ref": "sidebar",
    })

    assert response.status_code == 307
    location = urlparse(response.headers["location"])
    assert location.netloc == "formai.app"
    assert location.path == f"/forum/{forum['slug']}/question/{question['id']}/how-do-i-connect-a-custom-domain"
    query = parse_qs(location.query)
    assert query["utm_source"] == ["redirect"]
    assert query["utm_campaign"] == ["forum-redirect"]
    assert query["ref"] == ["sidebar"]
    assert "dest" not in query

    events = await client.get("/api/analytics/events", headers=auth_headers)
    assert events.json()["events"] == {"redirect": 1}


@pytest.mark.asyncio
async def test_redirect_without_tracking(client, auth_headers, forum):
    await client.patch(f"/api/forums/{forum['id']}/domain", headers=auth_headers, json={"subdomain": "acme"})

    response = await client.get(f"/api/embed/redirect/{forum['id']}", params={"dest": "ask", "track": "false"})

    assert response.headers["location"] == "https://acme.formai.app/ask"
    events = await client.get("/api/analytics/events", headers=auth_headers)
    assert events.json()["events"] == {}

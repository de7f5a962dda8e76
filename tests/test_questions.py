"""
Tests for questions, answers, votes and AI generated content.
"""
import json

import pytest

ANSWER_TEXT = "Point the CNAME at forums.formai.app and wait for DNS to propagate."


async def post_answer(client, headers, question_id, content=ANSWER_TEXT):
    response = await client.post(f"/api/questions/{question_id}/answers", headers=headers, json={"content": content})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_question_detail_is_public(client, question):
    response = await client.get(f"/api/questions/{question['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "How do I connect a custom domain?"
    assert data["answer_count"] == 0
    assert data["source"] == "dashboard"
    assert data["category_name"] is None


@pytest.mark.asyncio
async def test_question_validation(client, auth_headers, forum):
    response = await client.post(f"/api/forums/{forum['id']}/questions", headers=auth_headers, json={
        "title": "Hi",
        "content": "too short",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_question_in_foreign_forum_rejected(client, forum, other_headers):
    response = await client.post(f"/api/forums/{forum['id']}/questions", headers=other_headers, json={
        "title": "Can I post here?",
        "content": "Trying to post into someone else's forum.",
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_private_forum_questions_hidden_from_outsiders(client, auth_headers, forum, question, other_headers):
    await client.patch(f"/api/forums/{forum['id']}", headers=auth_headers, json={"is_public": False})

    anonymous = await client.get(f"/api/questions/{question['id']}")
    outsider = await client.get(f"/api/forums/{forum['id']}/questions", headers=other_headers)
    owner = await client.get(f"/api/forums/{forum['id']}/questions", headers=auth_headers)

    assert anonymous.status_code == 404
    assert outsider.status_code == 404
    assert owner.status_code == 200
    assert len(owner.json()) == 1


@pytest.mark.asyncio
async def test_popular_questions_sorted_by_views(client, auth_headers, forum, question):
    second = await client.post(f"/api/forums/{forum['id']}/questions", headers=auth_headers, json={
        "title": "Can I export my forum data?",
        "content": "I need a copy of every question and answer for our records.",
    })
    for _ in range(3):
        await client.post(f"/api/questions/{question['id']}/view")

    recent = await client.get(f"/api/forums/{forum['id']}/questions")
    popular = await client.get(f"/api/forums/{forum['id']}/questions", params={"type": "popular"})

    assert recent.json()[0]["id"] == second.json()["id"]
    assert popular.json()[0]["id"] == question["id"]
    assert popular.json()[0]["views"] == 3


@pytest.mark.asyncio
async def test_search_questions(client, forum, question):
    hit = await client.get(f"/api/forums/{forum['id']}/questions/search", params={"q": "cname"})
    miss = await client.get(f"/api/forums/{forum['id']}/questions/search", params={"q": "invoice"})

    assert [q["id"] for q in hit.json()] == [question["id"]]
    assert miss.json() == []


@pytest.mark.asyncio
async def test_answers_sorted_by_votes(client, auth_headers, question, other_headers):
    first = await post_answer(client, auth_headers, question["id"])
    second = await post_answer(client, auth_headers, question["id"], "Check the TXT verification record first, then the CNAME.")

    await client.post(f"/api/answers/{second['id']}/vote", headers=auth_headers, json={"is_upvote": True})
    await client.post(f"/api/answers/{second['id']}/vote", headers=other_headers, json={"is_upvote": True})
    await client.post(f"/api/answers/{first['id']}/vote", headers=other_headers, json={"is_upvote": False})

    by_votes = await client.get(f"/api/questions/{question['id']}/answers")
    oldest = await client.get(f"/api/questions/{question['id']}/answers", params={"sort_by": "oldest"})

    assert [a["id"] for a in by_votes.json()] == [second["id"], first["id"]]
    assert [a["score"] for a in by_votes.json()] == [2, -1]
    assert oldest.json()[0]["id"] == first["id"]


@pytest.mark.asyncio
async def test_vote_again_changes_direction(client, auth_headers, question):
    answer = await post_answer(client, auth_headers, question["id"])

    up = await client.post(f"/api/answers/{answer['id']}/vote", headers=auth_headers, json={"is_upvote": True})
    down = await client.post(f"/api/answers/{answer['id']}/vote", headers=auth_headers, json={"is_upvote": False})

    assert up.json()["score"] == 1
    assert down.json() == {"answer_id": answer["id"], "is_upvote": False, "score": -1}

    removed = await client.delete(f"/api/answers/{answer['id']}/vote", headers=auth_headers)
    assert removed.json()["score"] == 0
    assert removed.json()["is_upvote"] is None

    missing = await client.delete(f"/api/answers/{answer['id']}/vote", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_question_removes_answers(client, auth_headers, question):
    answer = await post_answer(client, auth_headers, question["id"])
    await client.post(f"/api/answers/{answer['id']}/vote", headers=auth_headers, json={"is_upvote": True})

    response = await client.delete(f"/api/questions/{question['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert (await client.get(f"/api/questions/{question['id']}/answers")).status_code == 404


@pytest.mark.asyncio
async def test_ai_answer_is_stored(client, auth_headers, question, fake_ai):
    fake_ai.queue("Add a **CNAME** record pointing at `forums.formai.app`.")

    response = await client.post(f"/api/questions/{question['id']}/ai-answer", headers=auth_headers, json={
        "persona_type": "expert",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["is_ai_generated"] is True
    assert data["ai_persona_type"] == "expert"
    assert data["author_name"] == "AI Expert"
    assert "CNAME" in data["content"]
    assert "How do I connect a custom domain?" in fake_ai.prompts[0]


@pytest.mark.asyncio
async def test_ai_answer_with_persona(client, auth_headers, question, fake_ai):
    persona = await client.post("/api/ai-personas/", headers=auth_headers, json={
        "name": "Dana the Moderator",
        "type": "moderator",
        "description": "Keeps the community friendly and on topic",
        "personality": "calm",
        "tone": "welcoming",
    })
    fake_ai.queue("Welcome! Here is how to set up the domain.")

    response = await client.post(f"/api/questions/{question['id']}/ai-answer", headers=auth_headers, json={
        "persona_id": persona.json()["id"],
    })

    assert response.status_code == 201
    data = response.json()
    assert data["persona_id"] == persona.json()["id"]
    assert data["ai_persona_type"] == "moderator"
    assert data["author_name"] == "Dana the Moderator"
    assert "Dana the Moderator" in fake_ai.prompts[0]


@pytest.mark.asyncio
async def test_ai_answer_failure_is_not_stored(client, auth_headers, question, fake_ai):
    fake_ai.queue(RuntimeError("provider down"))

    response = await client.post(f"/api/questions/{question['id']}/ai-answer", headers=auth_headers, json={})

    assert response.status_code == 502
    answers = await client.get(f"/api/questions/{question['id']}/answers")
    assert answers.json() == []


@pytest.mark.asyncio
async def test_generate_questions(client, auth_headers, forum, fake_ai):
    fake_ai.queue("```json\n" + json.dumps({"questions": [
        {"title": "What is a custom domain?", "content": "I keep seeing this term. What does it mean?"},
        {"title": "Bad", "content": "Too short a title, dropped."},
        {"title": "Do I need SSL for my forum?", "content": "Is HTTPS set up automatically?"},
    ]}) + "\n```")

    response = await client.post(f"/api/forums/{forum['id']}/generate-questions", headers=auth_headers, json={
        "topic": "custom domains",
        "count": 3,
    })

    assert response.status_code == 201
    created = response.json()
    assert [q["title"] for q in created] == ["What is a custom domain?", "Do I need SSL for my forum?"]
    assert all(q["is_ai_generated"] and q["source"] == "ai" for q in created)

    listed = await client.get(f"/api/forums/{forum['id']}/questions")
    assert len(listed.json()) == 2


@pytest.mark.asyncio
async def test_generate_answer_endpoint_reports_fallback(client, auth_headers, fake_ai):
    fake_ai.queue(RuntimeError("quota exceeded"))

    response = await client.post("/api/ai/generate-answer", headers=auth_headers, json={
        "question_title": "How do I reset my password?",
    })

    assert response.status_code == 200
    assert response.json()["fallback"] is True

"""
Tests for AI personas.
"""
import json

import pytest

from formai.config import settings


def persona_payload(**overrides):
    payload = {
        "name": "Dr. Data",
        "type": "expert",
        "description": "Senior analytics consultant with a decade of SEO work",
        "personality": "precise, patient",
        "tone": "professional",
        "response_length": 4,
        "expertise_areas": ["technical SEO", "analytics"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def persona(client, auth_headers):
    response = await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload())
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_persona(client, persona):
    assert persona["name"] == "Dr. Data"
    assert persona["type"] == "expert"
    assert persona["is_active"] is True
    assert persona["expertise_areas"] == ["technical SEO", "analytics"]


@pytest.mark.asyncio
async def test_create_persona_validation(client, auth_headers):
    short = await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(description="Too short"))
    wrong_type = await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(type="guru"))
    too_long = await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(response_length=6))

    assert short.status_code == 422
    assert wrong_type.status_code == 422
    assert too_long.status_code == 422


@pytest.mark.asyncio
async def test_persona_limit(client, auth_headers):
    for i in range(settings.PERSONA_LIMIT):
        response = await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(name=f"Persona {i}"))
        assert response.status_code == 201

    response = await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(name="One too many"))

    assert response.status_code == 400
    assert "limit" in response.json()["detail"].lower()


@pytest.mark.asyncio
async def test_list_active_only(client, auth_headers, persona):
    await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(
        name="Sleepy Sam", type="beginner", is_active=False,
    ))

    everyone = await client.get("/api/ai-personas/", headers=auth_headers)
    active = await client.get("/api/ai-personas/", headers=auth_headers, params={"active_only": True})

    assert len(everyone.json()) == 2
    assert [p["id"] for p in active.json()] == [persona["id"]]


@pytest.mark.asyncio
async def test_update_and_delete(client, auth_headers, persona, other_headers):
    foreign = await client.get(f"/api/ai-personas/{persona['id']}", headers=other_headers)
    assert foreign.status_code == 404

    updated = await client.patch(f"/api/ai-personas/{persona['id']}", headers=auth_headers, json={
        "tone": "casual",
        "response_length": 2,
    })
    assert updated.status_code == 200
    assert updated.json()["tone"] == "casual"
    assert updated.json()["name"] == "Dr. Data"

    deleted = await client.delete(f"/api/ai-personas/{persona['id']}", headers=auth_headers)
    assert deleted.status_code == 204
    assert (await client.get(f"/api/ai-personas/{persona['id']}", headers=auth_headers)).status_code == 404


@pytest.mark.asyncio
async def test_deleting_persona_keeps_its_answers(client, auth_headers, persona, question, fake_ai):
    fake_ai.queue("Point a CNAME at your forum host and wait for DNS to update.")
    answer = await client.post(f"/api/questions/{question['id']}/ai-answer", headers=auth_headers, json={
        "persona_id": persona["id"],
    })
    assert answer.status_code == 201

    await client.delete(f"/api/ai-personas/{persona['id']}", headers=auth_headers)

    answers = await client.get(f"/api/questions/{question['id']}/answers")
    assert len(answers.json()) == 1
    assert answers.json()[0]["persona_id"] is None


@pytest.mark.asyncio
async def test_stats(client, auth_headers, persona, question, fake_ai):
    fake_ai.queue("Point a CNAME at your forum host and wait for DNS to update.")
    await client.post(f"/api/questions/{question['id']}/ai-answer", headers=auth_headers, json={
        "persona_id": persona["id"],
    })
    await client.post("/api/ai-personas/", headers=auth_headers, json=persona_payload(
        name="Mod Molly", type="moderator", is_active=False,
    ))

    response = await client.get("/api/ai-personas/stats", headers=auth_headers)

    data = response.json()
    assert data["total"] == 2
    assert data["active"] == 1
    assert data["limit"] == settings.PERSONA_LIMIT
    assert data["by_type"] == {"beginner": 0, "intermediate": 0, "expert": 1, "moderator": 1}
    answers = {item["name"]: item["answers"] for item in data["answers_by_persona"]}
    assert answers == {"Dr. Data": 1, "Mod Molly": 0}


@pytest.mark.asyncio
async def test_preview_uses_persona_voice(client, auth_headers, persona, fake_ai):
    fake_ai.queue("Start by checking your DNS TTL.")

    response = await client.post(f"/api/ai-personas/{persona['id']}/test", headers=auth_headers, json={
        "question_title": "Why is my domain not resolving?",
    })

    assert response.status_code == 200
    assert response.json() == {
        "persona_id": persona["id"],
        "persona_type": "expert",
        "answer": "Start by checking your DNS TTL.",
    }
    prompt = fake_ai.prompts[0]
    assert "Your name is Dr. Data." in prompt
    assert "technical SEO, analytics" in prompt

    answers = await client.get("/api/ai-personas/stats", headers=auth_headers)
    assert answers.json()["answers_by_persona"][0]["answers"] == 0


@pytest.mark.asyncio
async def test_generate_from_website(client, auth_headers, fake_ai):
    fake_ai.queue("```json\n" + json.dumps({"personas": [
        {"name": "Helpful Hannah", "type": "wizard", "description": "Loves onboarding", "response_length": 9},
        {"description": "no name"},
        {"name": "Expert Eli", "type": "expert", "expertise_areas": ["DNS"]},
    ]}) + "\n```")

    response = await client.post("/api/ai-personas/generate-from-website", headers=auth_headers, json={
        "website_url": "https://acme.com",
        "count": 2,
    })

    assert response.status_code == 200
    personas = response.json()["personas"]
    assert [p["name"] for p in personas] == ["Helpful Hannah", "Expert Eli"]
    assert personas[0]["type"] == "intermediate"
    assert personas[0]["response_length"] == 5
    assert personas[1]["expertise_areas"] == ["DNS"]
    assert (await client.get("/api/ai-personas/", headers=auth_headers)).json() == []

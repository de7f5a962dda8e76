"""
Tests for event tracking, analytics aggregates and the dashboard.
"""
import uuid
from datetime import datetime

import pytest

from formai.services.analytics_service import daily_series


def test_daily_series_fills_empty_days():
    now = datetime(2024, 3, 10, 15, 0)
    timestamps = [datetime(2024, 3, 10, 9, 0), datetime(2024, 3, 10, 11, 0), datetime(2024, 3, 8, 23, 59)]

    series = daily_series(timestamps, 3, now=now)

    assert series == [
        {"date": "2024-03-08", "count": 1},
        {"date": "2024-03-09", "count": 0},
        {"date": "2024-03-10", "count": 2},
    ]


def test_daily_series_ignores_days_outside_window():
    series = daily_series([datetime(2024, 1, 1)], 2, now=datetime(2024, 3, 10))
    assert [point["count"] for point in series] == [0, 0]


async def track(client, forum_id, **fields):
    user_agent = fields.pop("user_agent", "Mozilla/5.0 (X11; Linux x86_64)")
    payload = {"forum_id": forum_id, "event_type": "page_view"}
    payload.update(fields)
    response = await client.post("/api/analytics/track-event", json=payload, headers={"User-Agent": user_agent})
    assert response.status_code == 201, response.text
    return response


@pytest.mark.asyncio
async def test_track_event_for_unknown_forum(client):
    response = await client.post("/api/analytics/track-event", json={
        "forum_id": str(uuid.uuid4()),
        "event_type": "page_view",
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_dashboard_counts_page_views_and_sessions(client, auth_headers, forum, question):
    await track(client, forum["id"], session_id="s1", path="/q/1")
    await track(client, forum["id"], session_id="s1", path="/q/2")
    await track(client, forum["id"], session_id="s2", path="/q/1")
    await track(client, forum["id"], event_type="widget_click", session_id="s2")

    response = await client.get("/api/analytics/dashboard", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["period"] == "30d"
    assert data["questions"] == 1
    assert data["page_views"] == 3
    assert data["unique_sessions"] == 2

    events = await client.get("/api/analytics/events", headers=auth_headers)
    assert events.json()["events"] == {"page_view": 3, "widget_click": 1}


@pytest.mark.asyncio
async def test_audience_devices_from_user_agent(client, auth_headers, forum):
    await client.post("/api/analytics/track-event", json={"forum_id": forum["id"], "event_type": "page_view"}, headers={
        "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148",
    })
    await client.post("/api/analytics/track-event", json={
        "forum_id": forum["id"], "event_type": "page_view", "referrer": "https://google.com",
    }, headers={"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"})

    response = await client.get("/api/analytics/audience", headers=auth_headers)

    data = response.json()
    assert data["devices"] == {"mobile": 1, "desktop": 1}
    assert data["referrers"]["https://google.com"] == 1
    assert data["referrers"]["unknown"] == 1


@pytest.mark.asyncio
async def test_traffic_series_covers_period(client, auth_headers, forum):
    await track(client, forum["id"])

    response = await client.get("/api/analytics/traffic", headers=auth_headers, params={"period": "7d"})

    series = response.json()["series"]
    assert len(series) == 7
    assert series[-1]["count"] == 1


@pytest.mark.asyncio
async def test_invalid_period_rejected(client, auth_headers):
    response = await client.get("/api/analytics/traffic", headers=auth_headers, params={"period": "1y"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_top_content_by_views(client, auth_headers, forum, question):
    await client.post(f"/api/questions/{question['id']}/view")

    response = await client.get("/api/analytics/top-content", headers=auth_headers)

    content = response.json()["content"]
    assert content[0]["question_id"] == question["id"]
    assert content[0]["views"] == 1


@pytest.mark.asyncio
async def test_foreign_forum_filter_is_404(client, forum, other_headers):
    response = await client.get("/api/analytics/dashboard", headers=other_headers, params={"forum_id": forum["id"]})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_ai_activity_counts_generated_answers(client, auth_headers, question, fake_ai):
    fake_ai.queue("Add a CNAME record pointing at your forum host.")
    await client.post(f"/api/questions/{question['id']}/ai-answer", headers=auth_headers, json={})

    response = await client.get("/api/analytics/ai-activity", headers=auth_headers, params={"period": "7d"})

    series = response.json()["series"]
    assert len(series) == 7
    assert series[-1] == {"date": series[-1]["date"], "questions": 0, "answers": 1}


@pytest.mark.asyncio
async def test_realtime_snapshot(client, auth_headers, forum):
    await track(client, forum["id"], session_id="live", path="/q/1")

    response = await client.get("/api/analytics/realtime", headers=auth_headers)

    data = response.json()
    assert data["events"] == 1
    assert data["active_sessions"] == 1
    assert data["top_paths"] == {"/q/1": 1}
    assert data["recent_events"][0]["event_type"] == "page_view"


@pytest.mark.asyncio
async def test_dashboard_stats(client, auth_headers, forum, question):
    response = await client.get("/api/dashboard/stats", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_forums"] == 1
    assert data["total_questions"] == 1
    assert data["total_answers"] == 0
    assert data["lead_forms"] == 0
    assert data["conversion_rate"] == 0.0


@pytest.mark.asyncio
async def test_dashboard_activity_feed(client, auth_headers, forum, question):
    response = await client.get("/api/dashboard/activity", headers=auth_headers)

    data = response.json()
    actions = [item["action"] for item in data["items"]]
    assert "forum_created" in actions
    assert "question_created" in actions
    assert data["total"] == len(data["items"])
    assert data["page"] == 1
    assert data["has_next"] is False

    paged = await client.get("/api/dashboard/activity", headers=auth_headers, params={"limit": 1, "page": 2})
    assert len(paged.json()["items"]) == 1
    assert paged.json()["has_prev"] is True

    questions_only = await client.get("/api/dashboard/activity", headers=auth_headers, params={"entity_type": "question"})
    assert [item["action"] for item in questions_only.json()["items"]] == ["question_created"]


@pytest.mark.asyncio
async def test_dashboard_chart(client, auth_headers, question):
    response = await client.get("/api/dashboard/chart", headers=auth_headers, params={"days": 7})

    data = response.json()
    assert len(data["labels"]) == 7
    assert data["data"][-1] == 1
    assert data["total"] == 1

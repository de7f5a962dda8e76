"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, created fresh for each test
- A fake AI provider with queued replies
- HTTPX AsyncClient against the app with dependencies overridden
- Registered users in two separate organizations
"""
import os
from typing import AsyncGenerator, List, Optional

# Settings are read at import time; keep tests off Postgres and real AI providers
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["AI_MAX_RETRIES"] = "1"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import formai.models  # noqa: F401
from formai.main import app
from formai.database import get_session, get_session_factory
from formai.api.deps import get_ai_service
from formai.services.ai_service import AIContentService


# =============================================================================
# Fake AI provider
# =============================================================================

class FakeReply:
    def __init__(self, text: str):
        self.text = text


class FakeGemini:
    """Stands in for a Gemini GenerativeModel. Replies are served in order."""

    def __init__(self, replies: Optional[List] = None):
        self.replies = list(replies or [])
        self.prompts: List[str] = []

    def queue(self, *replies) -> "FakeGemini":
        self.replies.extend(replies)
        return self

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if not self.replies:
            raise RuntimeError("no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return FakeReply(reply)


@pytest.fixture
def fake_ai() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def ai(fake_ai: FakeGemini) -> AIContentService:
    return AIContentService(client=fake_ai, provider="gemini")


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


# =============================================================================
# Client
# =============================================================================

@pytest.fixture
async def client(session_factory, ai) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient for the app; each request gets its own session."""
    async def override_get_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_ai_service] = lambda: ai

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, email: str, org_name: str, password: str = "password123") -> dict:
    """Register a user with a new organization and return auth headers."""
    response = await client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "org_name": org_name,
        "full_name": "Test User",
    })
    assert response.status_code == 201, response.text

    response = await client.post("/api/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def register():
    return register_and_login


@pytest.fixture
async def auth_headers(client: AsyncClient) -> dict:
    return await register_and_login(client, "owner@acme.com", "Acme Corp")


@pytest.fixture
async def other_headers(client: AsyncClient) -> dict:
    """A user in a different organization."""
    return await register_and_login(client, "rival@globex.com", "Globex")


# =============================================================================
# Content fixtures
# =============================================================================

@pytest.fixture
async def forum(client: AsyncClient, auth_headers: dict) -> dict:
    response = await client.post("/api/forums/", headers=auth_headers, json={
        "name": "Acme Help Community",
        "description": "Questions about Acme products",
        "main_website_url": "https://acme.com",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def question(client: AsyncClient, auth_headers: dict, forum: dict) -> dict:
    response = await client.post(f"/api/forums/{forum['id']}/questions", headers=auth_headers, json={
        "title": "How do I connect a custom domain?",
        "content": "I added the CNAME record but the forum still shows the default address.",
    })
    assert response.status_code == 201, response.text
    return response.json()

"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; configure before faqdesk is imported.
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["LLM_CONFIDENCE_THRESHOLD"] = "0.0"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from faqdesk.core.database import Base, create_session_factory
import faqdesk.models  # noqa: F401
from faqdesk.models.tenant import Tenant
from faqdesk.services.llm_client import LLMClient
from tests.fakes.factories import make_settings
from tests.fakes.fake_llm import FakeLLM


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def tenant(db):
    t = Tenant(key="default", name="기본")
    db.add(t)
    await db.commit()
    await db.refresh(t)
    return t


@pytest.fixture
async def other_tenant(db):
    t = Tenant(key="other", name="다른 채널")
    db.add(t)
    await db.commit()
    await db.refresh(t)
    return t


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def llm(fake_llm, settings):
    return LLMClient(settings, client_factory=fake_llm.factory)


@pytest.fixture
async def client(session_factory, settings, fake_llm, tenant):
    """HTTP client bound to the test database and fake LLM transport."""
    from faqdesk.dependencies import get_db, get_llm_client, get_settings
    from faqdesk.main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_llm_client] = lambda: LLMClient(settings, client_factory=fake_llm.factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

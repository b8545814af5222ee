import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gina.core import database
from gina.core.config import get_settings
from gina.core.flags import get_flags
from gina.models import User
from gina.services.memory import FACT_EXTRACTION_SYSTEM, SUMMARY_SYSTEM
from gina.services.store import RecordStore


class FakeCompletion:
    """
    Stands in for llm.complete. Picks the canned answer by the system prompt,
    so one fake serves the reply, fact extraction and summary calls.
    Exception values are raised instead of returned.
    """

    def __init__(self, reply="I'm here with you.", facts="{}", summary="User checked in."):
        self.reply = reply
        self.facts = facts
        self.summary = summary
        self.calls = []

    async def __call__(self, messages, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        system = messages[0]["content"]
        if system == FACT_EXTRACTION_SYSTEM:
            answer = self.facts
        elif system == SUMMARY_SYSTEM:
            answer = self.summary
        else:
            answer = self.reply
        if isinstance(answer, Exception):
            raise answer
        return answer

    @property
    def reply_calls(self):
        return [
            c for c in self.calls
            if c["messages"][0]["content"] not in (FACT_EXTRACTION_SYSTEM, SUMMARY_SYSTEM)
        ]

    @property
    def extraction_calls(self):
        return [c for c in self.calls if c["messages"][0]["content"] == FACT_EXTRACTION_SYSTEM]

    @property
    def summary_calls(self):
        return [c for c in self.calls if c["messages"][0]["content"] == SUMMARY_SYSTEM]


@pytest.fixture
def fake_complete():
    return FakeCompletion()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}")
    event.listen(engine.sync_engine, "connect", database._enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory):
    return RecordStore(session_factory)


@pytest_asyncio.fixture
async def user_id(session_factory):
    async with session_factory() as db:
        user = User(email="sam@example.com", password_hash="not-a-real-hash")
        db.add(user)
        await db.commit()
        return user.id


@pytest_asyncio.fixture
async def app(tmp_path, monkeypatch, fake_complete):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.sqlite'}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    get_settings.cache_clear()
    get_flags.cache_clear()
    await database.close_db()

    from gina.factory import create_app
    from gina.orchestrator.orchestrator import TurnOrchestrator

    application = create_app()
    # ASGITransport does not run startup events
    await database.init_db()
    application.state.orchestrator = TurnOrchestrator(application.state.store, complete=fake_complete)

    yield application

    await application.state.orchestrator.drain()
    await database.close_db()
    get_settings.cache_clear()
    get_flags.cache_clear()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(client, email="sam@example.com", password="secret123"):
    resp = await client.post("/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(client):
    return bearer(await register(client))

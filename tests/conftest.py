"""
Pytest configuration and fixtures for the YouTube Optimizer backend
"""
import asyncio
import os
import tempfile

import pytest

# Settings are read at import time, so they must exist before the app loads.
os.environ.setdefault("STATE_SECRET", "test-state-secret")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{tempfile.gettempdir()}/youtube_optimizer_unused.db")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")
os.environ.setdefault("BASE_URL", "http://api.test")

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from youtube_optimizer import auth, credentials
from youtube_optimizer.auth import OAuthStateSigner, get_state_signer
from youtube_optimizer.database import get_session
from youtube_optimizer.main import app
from youtube_optimizer.services import youtube_service
from youtube_optimizer.sessions import SessionStore, get_session_store


USER_INFO = {"id": "1122", "name": "Test Creator", "email": "creator@example.com"}
CHANNEL = {
    "id": "UC_test_channel",
    "snippet": {"title": "Test Channel"},
    "statistics": {"subscriberCount": "1200", "videoCount": "42"},
}
TOKENS = {
    "access_token": "ya29.test-access",
    "refresh_token": "1//test-refresh",
    "expires_in": 3599,
    "token_type": "Bearer",
}


@pytest.fixture
def db_sessionmaker(tmp_path):
    """Fresh SQLite database per test; NullPool keeps connections off any one event loop"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    asyncio.run(create_tables())
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def with_session(db_sessionmaker):
    """Run ``fn(session)`` to completion against the test database"""
    def _run(fn):
        async def _inner():
            async with db_sessionmaker() as session:
                return await fn(session)
        return asyncio.run(_inner())
    return _run


@pytest.fixture
def save_keys(with_session):
    def _save(user_id, **fields):
        return with_session(lambda session: credentials.save_api_key(session, user_id, **fields))
    return _save


@pytest.fixture
def configured_user(save_keys):
    """The ``u1`` user with OAuth client credentials stored"""
    save_keys("u1", google_client_id="cid", google_client_secret="secret")
    return "u1"


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def state_signer():
    return OAuthStateSigner("test-state-secret", ttl_seconds=600)


@pytest.fixture
def client(db_sessionmaker, session_store, state_signer):
    """Test client with database, session store and state signer overridden"""
    async def override_get_session():
        async with db_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_state_signer] = lambda: state_signer
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeYouTube:
    """Stands in for the googleapiclient YouTube resource"""

    def __init__(self, items):
        self.items = items
        self.list_kwargs = None

    def channels(self):
        return self

    def list(self, **kwargs):
        self.list_kwargs = kwargs
        return self

    def execute(self):
        return {"kind": "youtube#channelListResponse", "items": self.items}


@pytest.fixture
def fake_google(monkeypatch):
    """Replace the token, userinfo and channel round trips with canned responses"""
    state = {"youtube": FakeYouTube([CHANNEL]), "codes": []}

    async def fake_exchange_code(client, code):
        state["codes"].append(code)
        return dict(TOKENS)

    async def fake_fetch_user_info(client):
        return dict(USER_INFO)

    def fake_get_youtube_service(tokens, client_id, client_secret):
        state["service_args"] = (tokens["access_token"], client_id, client_secret)
        return state["youtube"]

    monkeypatch.setattr(auth, "exchange_code", fake_exchange_code)
    monkeypatch.setattr(auth, "fetch_user_info", fake_fetch_user_info)
    monkeypatch.setattr(youtube_service, "get_youtube_service", fake_get_youtube_service)
    return state

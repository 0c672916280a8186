"""Shared pytest fixtures: SQLite in-memory database and an ASGI test client."""

import logging
import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from collabnotes.core.models import BaseModel, User
from collabnotes.core.services.interfaces import ResetLinkSender
from collabnotes.core.services.reset_links import get_reset_link_sender
from collabnotes.database import get_db_session
from collabnotes.main import app
from collabnotes.security import create_access_token, hash_password

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

DEFAULT_PASSWORD = "Sup3r$ecret"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
async def test_session(session_maker):
    async with session_maker() as session:
        yield session


class RecordingResetLinkSender(ResetLinkSender):
    """Keeps delivered links instead of sending them."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def send(self, email: str, link: str) -> None:
        self.sent.append((email, link))


@pytest.fixture
def reset_links():
    return RecordingResetLinkSender()


@pytest.fixture
def test_app(session_maker, reset_links):
    """App with the database and reset-link delivery swapped out."""

    async def _override_get_db():
        # one session per request, like the real dependency
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_reset_link_sender] = lambda: reset_links
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(test_session):
    """Factory inserting a user directly."""

    async def _make(email: str, name: str = "Test User", password: str = DEFAULT_PASSWORD) -> User:
        user = User(email=email, name=name, password_hash=hash_password(password))
        test_session.add(user)
        await test_session.commit()
        return user

    return _make


def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def refresh_cookie_from(response) -> str | None:
    """Raw refresh token from the Set-Cookie header, None if it was cleared."""
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == "refresh_token":
            value = rest.split(";", 1)[0].strip().strip('"')
            return value or None
    return None


def cookie_header(token: str) -> dict:
    return {"Cookie": f"refresh_token={token}"}

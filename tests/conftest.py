"""Shared fixtures: a throwaway SQLite database and a TestClient per test."""
import asyncio
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="timebank-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/timebank.db"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient

from timebank.config import settings
from timebank.core.security import create_access_token
from timebank.database import AsyncSessionLocal, Base, engine
from timebank.main import app
from timebank.models.profile import Profile


def run(coro):
    return asyncio.run(coro)


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _insert(*rows):
    async with AsyncSessionLocal() as session:
        session.add_all(rows)
        await session.commit()
        for row in rows:
            await session.refresh(row)
    return rows


@pytest.fixture
def client():
    run(_reset_schema())
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def add_rows(client):
    """Insert ORM objects directly, for rows the API only reads."""
    def _add(*rows):
        return run(_insert(*rows))
    return _add


@pytest.fixture
def make_profile(add_rows):
    def _make(display_name="Alice", role="member", active=True, email=None):
        profile = Profile(
            email=email or f"{display_name.lower()}@example.com",
            display_name=display_name,
            role=role,
            active=active,
        )
        add_rows(profile)
        return profile
    return _make


def auth_headers(profile) -> dict:
    token = create_access_token({"sub": profile.id, "ver": profile.session_version})
    return {"Authorization": f"Bearer {token}"}


class RecordingSMTP:
    """Stands in for smtplib.SMTP and keeps what would have been sent."""

    sent = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, msg):
        self.sent.append(msg)


@pytest.fixture
def outbox(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.test")
    monkeypatch.setattr(settings, "SMTP_FROM", "timebank@example.com")
    monkeypatch.setattr(RecordingSMTP, "sent", [])
    monkeypatch.setattr("timebank.services.mailer.smtplib.SMTP", RecordingSMTP)
    return RecordingSMTP.sent

"""
Shared pytest fixtures for backend tests.
Uses a temp-file SQLite database and fake Anthropic clients for isolation.
"""
import pytest
import sqlite3
import sys
import os
from datetime import date
from types import SimpleNamespace

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import database

# Fixed reference date for date arithmetic (a Monday)
REFERENCE_DATE = date(2026, 10, 19)


class FakeMessages:
    """Stands in for AsyncAnthropic.messages: returns a canned reply or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeAnthropic:
    def __init__(self, reply=None, error=None):
        self.messages = FakeMessages(reply=reply, error=error)


@pytest.fixture
def fake_client_factory():
    return FakeAnthropic


@pytest.fixture
def reference_date():
    return REFERENCE_DATE


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Create an isolated test database for each test.
    Uses a temp file (not :memory:) because database.py opens new connections per operation.
    """
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(database, "DATABASE_PATH", db_path)
    monkeypatch.setattr(database, "init_db", lambda: None)

    # Create tables directly (skip alembic for tests)
    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE tasks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT DEFAULT '',
            status TEXT NOT NULL DEFAULT 'To Do',
            priority TEXT NOT NULL DEFAULT 'Medium',
            due_date TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()

    yield db_path


@pytest.fixture
def app_client(test_db, monkeypatch):
    """
    Create a test client for the FastAPI app.
    Mocks init_db to skip alembic migrations and disables the model path.
    """
    from fastapi.testclient import TestClient
    import main
    from ai_parser import TranscriptParser

    # main imported init_db by name, so patch it there too
    monkeypatch.setattr(main, "init_db", lambda: None)
    monkeypatch.setattr(main, "transcript_parser", TranscriptParser())

    with TestClient(main.app) as client:
        yield client

"""Pytest fixtures — file-backed SQLite database, recreated for every test."""
import os

SQLITE_URL = "sqlite:///./test.db"

# Must be set before the app (and its settings) are imported.
os.environ["DATABASE_URL"] = SQLITE_URL
os.environ["SCHEDULER_ENABLED"] = "false"

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402

# Import all models so they register with Base.metadata
from app import models  # noqa: E402, F401


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 15})

    # WAL lets readers proceed while one writer holds the lock
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth_headers(user: dict) -> dict:
    """Identity header the upstream gateway would attach for ``user``."""
    return {"X-User-Id": user["user_id"]}


def create_test_user(client: TestClient, name: str = "Test User", role: str = "ATTENDEE",
                     email: str = None, tz: str = None) -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "name": name,
        "email": email or f"{name.lower().replace(' ', '.')}@example.com",
        "role": role,
        "timezone": tz,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(client: TestClient, host: dict, title: str = "Launch Party",
                      start_offset_hours: float = 48, deadline_offset_hours: float = 24,
                      max_attendees: int = 10) -> dict:
    """Helper — POST /api/events as ``host``; offsets are relative to now."""
    now = datetime.now(timezone.utc)
    resp = client.post("/api/events/", headers=auth_headers(host), json={
        "title": title,
        "start_date_time": (now + timedelta(hours=start_offset_hours)).isoformat(),
        "rsvp_deadline": (now + timedelta(hours=deadline_offset_hours)).isoformat(),
        "max_attendees": max_attendees,
        "location": "Main Hall",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def invite(client: TestClient, host: dict, event: dict, *attendees: dict) -> list[dict]:
    """Helper — invite attendees and return the created invitations."""
    resp = client.post("/api/rsvps/invite", headers=auth_headers(host), json={
        "event_id": event["event_id"],
        "attendee_ids": [a["user_id"] for a in attendees],
    })
    assert resp.status_code == 201, resp.text
    return resp.json()

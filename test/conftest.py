"""Pytest configuration and fixtures."""

import os
import tempfile

# Point the registry at a throwaway SQLite file before any player_registry import.
_DB_DIR = tempfile.mkdtemp(prefix="player-registry-test-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402

FIXED_NOW = datetime(2025, 10, 4, 10, 30, 0)


def make_payload(n: int = 0, **overrides):
    """Valid registration body; `n` varies the unique fields."""
    payload = {
        "firstName": "Anil",
        "lastName": "Kumble",
        "dateOfBirth": "2005-01-01",
        "gender": "male",
        "email": "a@b.com" if n == 0 else f"player{n}@example.com",
        "phone": "9876543210" if n == 0 else f"98765{n:05d}",
        "streetAddress": "1 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postalCode": "560001",
        "role": "Bowler",
        "battingOrderPreference": "Lower Order",
        "battingStyle": "Right Handed Bat",
        "username": "anilk" if n == 0 else f"player_{n}",
        "password": "secret1",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload():
    return make_payload()


@pytest.fixture
def fresh_db():
    """Empty tables and a counter row at 0."""
    from player_registry.api.database import Base, SessionLocal, engine, init_db
    from player_registry.api.store import ensure_counter

    Base.metadata.drop_all(bind=engine)
    init_db()
    db = SessionLocal()
    try:
        ensure_counter(db)
    finally:
        db.close()


@pytest.fixture
def db_session(fresh_db):
    from player_registry.api.database import SessionLocal

    db = SessionLocal()
    yield db
    db.close()


@pytest.fixture
def client(fresh_db, monkeypatch):
    """TestClient with the server clock pinned to FIXED_NOW."""
    from fastapi.testclient import TestClient

    from player_registry.api import main

    monkeypatch.setattr(main, "_now", lambda: FIXED_NOW)
    with TestClient(main.app) as c:
        yield c

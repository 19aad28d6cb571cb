# tests/conftest.py
# PURPOSE: temp SQLite per test, a TestClient with DB/store dependencies overridden,
# and helpers to create users for API and store tests.

# Ensure project root is on sys.path so `import todo_app` works when running pytest.
import sys, os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import tempfile
from typing import Dict

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from todo_app.db import Base, get_db  # DB metadata + original dependency to override
from todo_app.db_models import UserDB
from todo_app.main import app  # FastAPI app
from todo_app.models import UserPublic
from todo_app.rate_limit import limiter
from todo_app.task_store import TaskStore, get_task_store


@pytest.fixture()
def session_factory():
    # 1) Create a temporary SQLite file (so data is isolated per test)
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    test_db_url = f"sqlite:///{tmp.name}"

    # 2) Create a new engine/session factory for tests and the tables
    engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    yield TestingSessionLocal

    # 3) Cleanup: drop tables, dispose engine, delete temp file
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    os.unlink(tmp.name)


@pytest.fixture()
def store(session_factory):
    return TaskStore(session_factory)


@pytest.fixture()
def make_user(session_factory):
    """Insert a user row directly and return its public identity."""

    def _make(email: str, name: str | None = None) -> UserPublic:
        with session_factory() as db:
            row = UserDB(email=email, name=name, password_hash="not-a-real-hash")
            db.add(row)
            db.commit()
            db.refresh(row)
            return UserPublic.model_validate(row)

    return _make


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_task_store] = lambda: TaskStore(session_factory)
    # limits are per client address and would leak between tests
    limiter.reset()

    # TestClient as context manager runs the lifespan startup/shutdown
    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def login(client):
    """Register + log in a user through the API; returns bearer auth headers."""

    def _login(email: str, password: str = "secret-123") -> Dict[str, str]:
        r = client.post("/api/v1/auth/register", json={"email": email, "password": password})
        assert r.status_code == 201
        r = client.post("/api/v1/auth/login", data={"username": email, "password": password})
        assert r.status_code == 200
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login

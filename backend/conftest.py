"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database (StaticPool, so the API
and the test see the same connection) and a TestClient whose get_db is
overridden to use it. The app lifespan is not run.
"""
import os
from datetime import datetime, timedelta, timezone

# Test environment, before any telemed import reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["ALLOWED_HOSTS"] = "testserver,localhost,127.0.0.1"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["GROQ_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from telemed import models  # noqa: F401 - register models
from telemed.api.deps import get_db
from telemed.core.rate_limiter import rate_limiter
from telemed.db.base import Base
from telemed.main import app

PASSWORD = "Passw0rd-123"


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """register(email, role, **extra) -> (auth headers, /auth/me payload)."""

    def _register(email: str, role: str = "PATIENT", **extra):
        body = {"email": email, "password": PASSWORD, "role": role, **extra}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 201, resp.text

        login = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert login.status_code == 200, login.text
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        return headers, resp.json()

    return _register


@pytest.fixture
def patient(register):
    return register("pat@example.com", "PATIENT", firstName="Pat", lastName="Jones")


@pytest.fixture
def doctor(register):
    return register("doc@example.com", "DOCTOR", firstName="Gregory", lastName="House", specialization="General")


@pytest.fixture
def pharmacist(register):
    return register("pharm@example.com", "PHARMACIST", firstName="Jane", lastName="Doe")


def future_iso(days: int = 1) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()

"""
Shared test fixtures - in-memory database, API client and web client.

Every test gets a fresh in-memory SQLite database. The API's get_db
dependency is overridden to hand out sessions bound to it, and the web
frontend's StudentApiClient is wired to a TestClient of the API app so
the whole stack runs in-process.
"""

import os

# Must be set before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.client.api_client import StudentApiClient
from app.database import Base, get_db
from app.main import app as api_app
from app.web.main import app as web_app, get_api_client


@pytest.fixture
def test_engine():
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
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """TestClient for the REST API with get_db overridden."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api_app.dependency_overrides[get_db] = override_get_db
    yield TestClient(api_app)
    api_app.dependency_overrides.clear()


@pytest.fixture
def api_client(client):
    """StudentApiClient talking to the in-process API, caching disabled."""
    return StudentApiClient(client, cache_ttl_seconds=0)


@pytest.fixture
def web_client(api_client):
    """TestClient for the web frontend, backed by the in-process API."""
    web_app.dependency_overrides[get_api_client] = lambda: api_client
    yield TestClient(web_app)
    web_app.dependency_overrides.clear()


@pytest.fixture
def john():
    return {"name": "John Doe", "student_id": "ST001", "address": "123 Main St, City"}


@pytest.fixture
def created(client, john):
    """A student created through the API; returns the response body."""
    res = client.post("/api/students", json=john)
    assert res.status_code == 201
    return res.json()

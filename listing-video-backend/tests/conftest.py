# listing-video-backend/tests/conftest.py

import os
import sys

import pytest

# Add the parent directory to the Python path so we can import from it
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
import tasks
from auth import get_or_create_user
from database import Base, get_db
from main import app
from routers import realtime
from services.job_service import JobService

USER_EMAIL = "agent@example.com"
HEADERS = {"X-User-Email": USER_EMAIL}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    """Points the workers and the realtime feed at the test database."""
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(tasks, "SessionLocal", factory)
    monkeypatch.setattr(realtime, "SessionLocal", factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def queued(monkeypatch):
    """Records tasks handed to the workers instead of sending them to a broker."""
    calls = []
    for task in (tasks.extract_property_task, tasks.generate_script_task, tasks.generate_video_task):
        monkeypatch.setattr(task, "delay", lambda job_id, _name=task.name: calls.append((_name, job_id)))
    return calls


@pytest.fixture
def client(session_factory, queued):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return get_or_create_user(db, USER_EMAIL)


@pytest.fixture
def job(db, user):
    return JobService.create_job(db, user.id, "https://listings.example.com/homes/42")


@pytest.fixture
def no_outbound_http(monkeypatch):
    """Fails the test if anything tries to call a real webhook."""
    def refuse(*args, **kwargs):
        raise AssertionError("unexpected outbound HTTP call")

    monkeypatch.setattr("services.webhook_service.requests.post", refuse)

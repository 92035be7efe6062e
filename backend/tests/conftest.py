"""Shared test fixtures for ProjectHub backend tests."""

import os
import sys

import pytest

# Ensure backend is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite:///test_projecthub.db")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from projecthub.api.errors import register_exception_handlers
from projecthub.api.v1.projects import router as projects_router
from projecthub.api.v1.tasks import router as tasks_router
from projecthub.api.v1.users import router as users_router
from projecthub.db.database import create_db_and_tables, get_session
from projecthub.services.directory import seed_users

TEAM = [
    ("Ana Petrovic", "ana@example.com"),        # id 1
    ("Marko Jovanovic", "marko@example.com"),   # id 2
    ("Jelena Nikolic", "jelena@example.com"),   # id 3
    ("Stefan Ilic", "stefan@example.com"),      # id 4
]


@pytest.fixture
def engine():
    """Isolated in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def users(session):
    """Four registered users with ids 1..4."""
    return seed_users(session, TEAM).created


@pytest.fixture
def app(engine, users):
    """Test app with the v1 routers and error handlers (no middleware)."""
    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(users_router)
    test_app.include_router(projects_router)
    test_app.include_router(tasks_router)

    def _session_override():
        with Session(engine) as session:
            yield session

    test_app.dependency_overrides[get_session] = _session_override
    return test_app


@pytest.fixture
def client(app):
    return TestClient(app)

"""Pytest fixtures for the invoice memory backend.

Provides reusable test fixtures for:
- In-memory repositories and a MemoryEngine wired to them
- SQLite database sessions with a fresh schema per test
- A FastAPI TestClient bound to the same SQLite database

Usage:
    def test_process(client, db_session):
        response = client.post("/api/v1/invoices/INV-1/process")
        assert response.status_code == 404
"""

import os
import sys
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from database import SessionLocal, engine
from domain.memory import EngineConfig
from models.base import Base
from fixtures.in_memory_repositories import InMemoryRepositories


@pytest.fixture
def repos() -> InMemoryRepositories:
    """Fresh set of in-memory repositories."""
    return InMemoryRepositories()


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """SQLite session on a freshly created schema.

    The in-memory database is shared through a StaticPool, so API requests
    made with `client` see the same data.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """FastAPI test client using the test database."""
    from main import app

    with TestClient(app) as test_client:
        yield test_client

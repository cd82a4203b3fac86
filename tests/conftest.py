"""
Pytest fixtures for Issue Tracker tests.

Every test gets a fresh in-memory SQLite database.
"""

from datetime import timedelta
from unittest.mock import create_autospec

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.models import Base, utcnow
from core.repositories import IssueCollection
from core.services import IssueStore

TEST_PROJECT = "apitest"


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )

    yield TestingSessionLocal, engine

    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def issue_collection(test_db):
    TestingSessionLocal, _ = test_db
    return IssueCollection(TestingSessionLocal)


@pytest.fixture
def issue_store(issue_collection):
    store = IssueStore(issue_collection)
    store.ensure_expiry_index()
    return store


@pytest.fixture
def mock_collection():
    """Collection double for asserting that no store call was made."""
    return create_autospec(IssueCollection, instance=True)


@pytest.fixture
def sample_issue_body():
    """Request body with every required field and no optional ones."""
    return {"issue_title": "t", "issue_text": "x", "created_by": "c"}


@pytest.fixture
def full_issue_body():
    return {
        "issue_title": "Crash on save",
        "issue_text": "Saving a draft with an emoji title crashes the editor.",
        "created_by": "alice",
        "assigned_to": "bob",
        "status_text": "triaged",
    }


@pytest.fixture
def advance_clock(monkeypatch):
    """Shift the time seen by IssueStore forward by the given seconds."""

    def advance(seconds: float):
        shifted = utcnow() + timedelta(seconds=seconds)
        monkeypatch.setattr("core.services.issue_service.utcnow", lambda: shifted)
        return shifted

    return advance


@pytest.fixture
def created_issue(issue_store, sample_issue_body):
    """An issue created through the store in the test project."""
    return issue_store.create_issue(TEST_PROJECT, sample_issue_body)

import os
import sys
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.main import create_app  # noqa: E402
from core.services import IssueStore  # noqa: E402


@pytest.fixture
def test_app_client(issue_store: IssueStore) -> Iterator[TestClient]:
    """Client against an app sharing the in-memory issue store, scheduler off."""
    app = create_app(issue_store=issue_store, enable_scheduler=False)

    with TestClient(app) as client:
        yield client


@pytest.fixture
def unsafe_client(issue_store: IssueStore) -> Iterator[TestClient]:
    """Client that returns 500 responses instead of re-raising server errors."""
    app = create_app(issue_store=issue_store, enable_scheduler=False)

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

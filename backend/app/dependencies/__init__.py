"""
FastAPI dependency injection module.

Provides the shared IssueStore built once at application startup.
"""

from fastapi import Request

from core.services import IssueStore


def get_issue_store(request: Request) -> IssueStore:
    """Get the process-wide IssueStore."""
    store = getattr(request.app.state, "issue_store", None)
    if store is None:
        raise RuntimeError("Issue store not initialized. It is created in application startup.")
    return store


__all__ = ["get_issue_store"]

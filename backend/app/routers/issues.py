"""
Project-scoped issue endpoints.

Each route hands its raw input to the IssueStore and returns the result.
Failures are raised as core.exceptions errors and rendered by
backend.app.error_handlers:
- list/create precondition failures -> 400 {"error"}
- update/delete failures -> 200 {"error", "_id"}
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from core.constants import MSG_DELETED
from core.services import IssueStore

from ..dependencies import get_issue_store
from ..schemas import DeleteResponse, IssueResponse

router = APIRouter(prefix="/issues", tags=["issues"])


@router.get("/{project}", response_model=list[IssueResponse])
def list_issues(
    project: str,
    request: Request,
    store: IssueStore = Depends(get_issue_store),
):
    """List a project's issues, filtered by any allow-listed query parameters."""
    return store.list_issues(project, dict(request.query_params))


@router.post("/{project}", response_model=IssueResponse)
def create_issue(
    project: str,
    body: dict[str, Any] | None = Body(default=None),
    store: IssueStore = Depends(get_issue_store),
):
    """Create an issue. issue_title, issue_text and created_by are required."""
    return store.create_issue(project, body)


@router.put("/{project}", response_model=IssueResponse)
def update_issue(
    project: str,
    body: dict[str, Any] | None = Body(default=None),
    store: IssueStore = Depends(get_issue_store),
):
    """Partially update the issue identified by body `_id`."""
    return store.update_issue(project, body)


@router.delete("/{project}", response_model=DeleteResponse)
def delete_issue(
    project: str,
    body: dict[str, Any] | None = Body(default=None),
    store: IssueStore = Depends(get_issue_store),
):
    """Delete the issue identified by body `_id`."""
    issue_id = store.delete_issue(project, body)
    return {"result": MSG_DELETED, "_id": str(issue_id)}

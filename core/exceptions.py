"""
Domain exceptions for issue operations.

Two failure tiers reach clients differently:
- IssueValidationError: precondition failure on list/create (client error status)
- IssueOperationError: any failure on update/delete (success status, error payload)
"""

from typing import Any


class IssueTrackerError(Exception):
    """Base class for issue operation failures reported to clients."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class IssueValidationError(IssueTrackerError):
    """Raised before any store access when list/create input is invalid."""


class IssueOperationError(IssueTrackerError):
    """Raised when an update or delete cannot be carried out."""

    def __init__(self, message: str, issue_id: Any = None):
        self.issue_id = issue_id
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.issue_id is not None:
            payload["_id"] = self.issue_id
        return payload


__all__ = ["IssueOperationError", "IssueTrackerError", "IssueValidationError"]

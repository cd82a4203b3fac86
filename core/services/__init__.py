"""
Core services with business logic.

Services provide a clean interface for business operations over an injected
store handle.
"""

from core.services.issue_service import IssueStore

__all__ = [
    "IssueStore",
]

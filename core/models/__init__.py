"""
SQLAlchemy models for the Issue Tracker.

Usage:
    from core.models import Issue
"""

from .base import Base
from .issue import Issue, expiry_index, new_issue_id, utcnow

__all__ = [
    "Base",
    "Issue",
    "expiry_index",
    "new_issue_id",
    "utcnow",
]

"""
Repository pattern implementations for data access.

Repositories wrap a single SQLAlchemy session. IssueCollection layers a
document-store interface on top, opening one transaction per call.

Usage:
    from core.db import db
    from core.repositories import IssueCollection

    collection = IssueCollection(db.SessionLocal)
    collection.find({"project_name": "apitest"}, sort=[("updated_on", 1)])
"""

from .base import BaseRepository
from .issue_collection import (
    ASCENDING,
    DESCENDING,
    DeleteResult,
    InsertOneResult,
    IssueCollection,
    UpdateResult,
)
from .issue_repository import IssueRepository

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "BaseRepository",
    "DeleteResult",
    "InsertOneResult",
    "IssueCollection",
    "IssueRepository",
    "UpdateResult",
]

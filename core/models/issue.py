"""
Issue SQLAlchemy model.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import EXPIRY_ANCHOR_FIELD, ID_FIELD

from .base import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form every issue timestamp is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_issue_id() -> str:
    return uuid.uuid4().hex


class Issue(Base):
    """
    A trackable record scoped to a single project.

    The project name is assigned once at creation and scopes every query.
    `expire_x_seconds_from` anchors the time-to-live purge and is not
    business data.
    """
    __tablename__ = "issues"
    __table_args__ = (
        Index("ix_issues_project_updated_on", "project_name", "updated_on"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_issue_id)
    project_name: Mapped[str] = mapped_column(String(255), index=True)
    issue_title: Mapped[str] = mapped_column(Text)
    issue_text: Mapped[str] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(255))
    assigned_to: Mapped[str] = mapped_column(String(255), default="")
    status_text: Mapped[str] = mapped_column(String(255), default="")
    open: Mapped[bool] = mapped_column(Boolean, default=True)
    created_on: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_on: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    expire_x_seconds_from: Mapped[datetime] = mapped_column(
        EXPIRY_ANCHOR_FIELD, DateTime, default=utcnow
    )

    # Document key -> mapped attribute
    DOCUMENT_FIELDS: ClassVar[Dict[str, str]] = {
        ID_FIELD: "id",
        "project_name": "project_name",
        "issue_title": "issue_title",
        "issue_text": "issue_text",
        "created_by": "created_by",
        "assigned_to": "assigned_to",
        "status_text": "status_text",
        "open": "open",
        "created_on": "created_on",
        "updated_on": "updated_on",
        EXPIRY_ANCHOR_FIELD: "expire_x_seconds_from",
    }

    @classmethod
    def attribute_for(cls, document_key: str) -> str:
        """Resolve a document key to its mapped attribute name."""
        try:
            return cls.DOCUMENT_FIELDS[document_key]
        except KeyError:
            raise ValueError(f"Unknown issue field: {document_key}") from None

    def to_document(self) -> Dict[str, Any]:
        """
        Convert the issue record into its document form.

        Returns:
            Dictionary keyed by wire field names (`_id`, `expireXSecondsFrom`).
        """
        return {key: getattr(self, attr) for key, attr in self.DOCUMENT_FIELDS.items()}

    def __repr__(self) -> str:
        return f"<Issue {self.id} project={self.project_name!r} open={self.open}>"


# Ascending index on the expiry anchor backing the time-to-live purge
expiry_index = Index("ix_issues_expire_anchor", Issue.expire_x_seconds_from)

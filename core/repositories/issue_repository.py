"""
Issue repository with project-scoped queries.
"""

from datetime import datetime
from typing import Any, Iterable

from core.models import Issue

from .base import BaseRepository


class IssueRepository(BaseRepository[Issue]):
    """
    Repository for Issue operations.

    Filters use mapped attribute names (`id`, `expire_x_seconds_from`); the
    document-key translation lives in IssueCollection.
    """

    model = Issue

    def find(self, order_by: Iterable[tuple[str, bool]] = (), **filters) -> list[Issue]:
        """
        Get every issue matching filters.

        Args:
            order_by: (attribute, ascending) pairs applied in order.
            **filters: Equality filters on mapped attributes.
        """
        query = self.filter_by(**filters)
        for attr, ascending in order_by:
            column = getattr(Issue, attr)
            query = query.order_by(column.asc() if ascending else column.desc())
        return query.all()

    def apply_changes(self, issue: Issue, values: dict[str, Any]) -> bool:
        """
        Set attribute values on an issue in place.

        Returns:
            True if at least one value differed from the stored one.
        """
        changed = False
        for attr, value in values.items():
            if getattr(issue, attr) != value:
                setattr(issue, attr, value)
                changed = True
        if changed:
            self.session.flush()
        return changed

    def existing_ids(self, ids: Iterable[str]) -> set[str]:
        """Return the subset of ids already stored."""
        ids = list(ids)
        if not ids:
            return set()
        rows = self.session.query(Issue.id).filter(Issue.id.in_(ids)).all()
        return {row[0] for row in rows}

    def delete_anchored_before(self, cutoff: datetime) -> int:
        """Bulk delete issues whose expiry anchor is at or before cutoff."""
        deleted = (
            self.session.query(Issue)
            .filter(Issue.expire_x_seconds_from <= cutoff)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted

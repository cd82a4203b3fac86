"""Base repository class with common query operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Query, Session

from core.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common query operations.

    Filters are passed as keyword arguments naming mapped attributes and are
    combined with equality. Unknown attribute names raise ValueError.

    Usage:
        class IssueRepository(BaseRepository[Issue]):
            model = Issue

        repo = IssueRepository(session)
        issues = repo.filter_by(project_name="apitest").all()
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: Any) -> T | None:
        """Get a single record by primary key."""
        return self.session.get(self.model, id)

    def create(self, **kwargs) -> T:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        self.session.flush()
        return instance

    def filter_by(self, **filters) -> Query:
        """Build a query matching every filter by equality."""
        query = self.session.query(self.model)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter key: {key}")
            query = query.filter(getattr(self.model, key) == value)
        return query

    def first(self, **filters) -> T | None:
        """Get the first record matching filters."""
        return self.filter_by(**filters).first()

    def delete(self, instance: T) -> None:
        self.session.delete(instance)
        self.session.flush()

    def count(self, **filters) -> int:
        """Get count of records, optionally filtered."""
        return self.filter_by(**filters).count()

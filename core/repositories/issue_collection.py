"""
Document-collection interface over the issues table.

Callers speak in issue documents keyed by wire names (`_id`,
`expireXSecondsFrom`). Every call runs in its own transaction, so each
insert, update and delete is atomic on its own and nothing more.
"""

from collections.abc import Callable, Generator, Iterable, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from core.logging import get_logger
from core.models import Issue, expiry_index, utcnow

from .issue_repository import IssueRepository

logger = get_logger("repositories.issue_collection")

ASCENDING = 1
DESCENDING = -1


@dataclass(frozen=True)
class InsertOneResult:
    inserted_id: str


@dataclass(frozen=True)
class UpdateResult:
    matched_count: int
    modified_count: int


@dataclass(frozen=True)
class DeleteResult:
    deleted_count: int


def _to_attributes(document: Mapping[str, Any]) -> dict[str, Any]:
    return {Issue.attribute_for(key): value for key, value in document.items()}


class IssueCollection:
    """
    The "issues" collection.

    Usage:
        collection = IssueCollection(db.SessionLocal)
        result = collection.insert_one({"project_name": "apitest", ...})
        collection.find_one({"_id": result.inserted_id})
    """

    name = "issues"

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._expire_after_seconds: int | None = None

    @contextmanager
    def _repository(self) -> Generator[IssueRepository, None, None]:
        session = self._session_factory()
        try:
            yield IssueRepository(session)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @property
    def expire_after_seconds(self) -> int | None:
        """TTL registered by create_expiry_index, or None when no TTL applies."""
        return self._expire_after_seconds

    def ping(self) -> bool:
        """Round-trip to the store; raises if it is unreachable."""
        with self._repository() as repo:
            repo.session.execute(text("SELECT 1"))
        return True

    def find(
        self,
        filter: Mapping[str, Any],
        sort: Sequence[tuple[str, int]] = (),
    ) -> list[dict[str, Any]]:
        """
        Find every document matching filter by equality.

        Args:
            filter: Document keys to values.
            sort: (document key, ASCENDING | DESCENDING) pairs.
        """
        order_by = [(Issue.attribute_for(key), direction == ASCENDING) for key, direction in sort]
        with self._repository() as repo:
            issues = repo.find(order_by=order_by, **_to_attributes(filter))
            return [issue.to_document() for issue in issues]

    def find_one(self, filter: Mapping[str, Any]) -> dict[str, Any] | None:
        with self._repository() as repo:
            issue = repo.first(**_to_attributes(filter))
            return issue.to_document() if issue else None

    def insert_one(self, document: Mapping[str, Any]) -> InsertOneResult:
        with self._repository() as repo:
            issue = repo.create(**_to_attributes(document))
            return InsertOneResult(inserted_id=issue.id)

    def insert_many(
        self,
        documents: Iterable[Mapping[str, Any]],
        skip_existing: bool = False,
    ) -> list[str]:
        """
        Insert documents in a single transaction.

        Args:
            documents: Documents to insert; `_id` may be supplied.
            skip_existing: Skip documents whose `_id` is already stored.

        Returns:
            Identifiers actually inserted.
        """
        documents = list(documents)
        inserted = []
        with self._repository() as repo:
            existing = set()
            if skip_existing:
                existing = repo.existing_ids(doc["_id"] for doc in documents if "_id" in doc)
            for document in documents:
                if document.get("_id") in existing:
                    continue
                issue = repo.create(**_to_attributes(document))
                inserted.append(issue.id)
        return inserted

    def update_one(self, filter: Mapping[str, Any], values: Mapping[str, Any]) -> UpdateResult:
        """
        Set values on the first document matching filter.

        A matched document whose stored values already equal `values` counts
        as matched but not modified.
        """
        with self._repository() as repo:
            issue = repo.first(**_to_attributes(filter))
            if issue is None:
                return UpdateResult(matched_count=0, modified_count=0)
            modified = repo.apply_changes(issue, _to_attributes(values))
            return UpdateResult(matched_count=1, modified_count=int(modified))

    def delete_one(self, filter: Mapping[str, Any]) -> DeleteResult:
        with self._repository() as repo:
            issue = repo.first(**_to_attributes(filter))
            if issue is None:
                return DeleteResult(deleted_count=0)
            repo.delete(issue)
            return DeleteResult(deleted_count=1)

    def create_expiry_index(self, field: str, expire_after_seconds: int) -> str:
        """
        Ensure the ascending expiry index exists and register its TTL.

        Idempotent; the index is created only if missing.

        Returns:
            The index name.
        """
        if Issue.attribute_for(field) != "expire_x_seconds_from":
            raise ValueError(f"No expiry index available on field: {field}")
        with self._repository() as repo:
            expiry_index.create(bind=repo.session.connection(), checkfirst=True)
        self._expire_after_seconds = expire_after_seconds
        logger.info(
            "expiry_index_ready",
            index=expiry_index.name,
            expire_after_seconds=expire_after_seconds,
        )
        return expiry_index.name

    def delete_expired(self, now: datetime | None = None) -> int:
        """
        Purge documents whose expiry anchor is at least the TTL in the past.

        Returns:
            Number of documents removed (0 when no TTL is registered).
        """
        if self._expire_after_seconds is None:
            return 0
        cutoff = (now or utcnow()) - timedelta(seconds=self._expire_after_seconds)
        with self._repository() as repo:
            return repo.delete_anchored_before(cutoff)

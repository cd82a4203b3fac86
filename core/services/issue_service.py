"""
Issue Store service.

Business logic for the project-scoped issue lifecycle: list with filters,
create, partial update, and delete. Each operation validates and shapes its
input, makes its store calls, and returns the shaped result.

Failures surface as two exception tiers (see core.exceptions):
- list/create precondition failures raise IssueValidationError
- every update/delete failure raises IssueOperationError carrying the `_id`
Store errors during create propagate unchanged.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from core.constants import (
    EXPIRY_ANCHOR_FIELD,
    ID_FIELD,
    ISSUE_CREATE_FIELDS,
    ISSUE_EXPIRE_AFTER_SECONDS,
    ISSUE_OPTIONAL_FIELDS,
    ISSUE_REQUIRED_FIELDS,
    MSG_COULD_NOT_DELETE,
    MSG_COULD_NOT_UPDATE,
    MSG_MISSING_ID,
    MSG_NO_UPDATE_FIELDS,
    MSG_PROJECT_REQUIRED,
    MSG_REQUIRED_FIELDS_MISSING,
)
from core.exceptions import IssueOperationError, IssueValidationError
from core.logging import get_logger
from core.models import utcnow
from core.parsing import (
    build_list_filters,
    build_update_patch,
    has_empty_typed_filter,
    parse_identifier,
    project_fields,
)
from core.repositories import ASCENDING, IssueCollection

logger = get_logger("services.issue_store")


class IssueStore:
    """
    Issue operations against a shared issues collection.

    The collection is injected once at startup and shared by every request.

    Usage:
        store = IssueStore(IssueCollection(db.SessionLocal))
        store.ensure_expiry_index()
        issue = store.create_issue("apitest", {"issue_title": "t", ...})
    """

    def __init__(
        self,
        collection: IssueCollection,
        expire_after_seconds: int = ISSUE_EXPIRE_AFTER_SECONDS,
    ):
        self.collection = collection
        self.expire_after_seconds = expire_after_seconds

    def ensure_expiry_index(self) -> str:
        """Create the time-to-live index on the expiry anchor if it is missing."""
        return self.collection.create_expiry_index(
            EXPIRY_ANCHOR_FIELD, expire_after_seconds=self.expire_after_seconds
        )

    # =========================================================================
    # List
    # =========================================================================

    def list_issues(self, project_name: str | None, query: Mapping[str, Any] | None) -> list[dict]:
        """
        Get a project's issues matching the allow-listed query filters.

        Returns:
            Matching issue documents ordered by updated_on ascending. Empty
            when an `_id`, `open` or date filter is sent empty.

        Raises:
            IssueValidationError: missing project or an invalid filter value.
        """
        if not project_name:
            raise IssueValidationError(MSG_PROJECT_REQUIRED)

        filters = build_list_filters(query)
        if not filters.ok:
            raise IssueValidationError(filters.error)
        if has_empty_typed_filter(filters.value):
            return []

        return self.collection.find(
            {"project_name": project_name, **filters.value},
            sort=[("updated_on", ASCENDING)],
        )

    # =========================================================================
    # Create
    # =========================================================================

    def create_issue(self, project_name: str | None, body: Mapping[str, Any] | None) -> dict:
        """
        Create an issue in a project.

        Returns:
            The stored document, re-read after insert.

        Raises:
            IssueValidationError: missing project or a required field is absent.
            SQLAlchemyError: the store failed; logged and re-raised.
        """
        if not project_name:
            raise IssueValidationError(MSG_PROJECT_REQUIRED)

        fields = project_fields(body, ISSUE_CREATE_FIELDS)
        if any(field not in fields for field in ISSUE_REQUIRED_FIELDS):
            raise IssueValidationError(MSG_REQUIRED_FIELDS_MISSING)

        for field in ISSUE_OPTIONAL_FIELDS:
            fields.setdefault(field, "")

        now = utcnow()
        try:
            result = self.collection.insert_one(
                {
                    "project_name": project_name,
                    **fields,
                    "open": True,
                    "created_on": now,
                    "updated_on": now,
                    EXPIRY_ANCHOR_FIELD: now,
                }
            )
            issue = self.collection.find_one({ID_FIELD: result.inserted_id})
        except SQLAlchemyError as e:
            logger.error(
                "issue_create_failed",
                project_name=project_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.info("issue_created", project_name=project_name, issue_id=result.inserted_id)
        return issue

    # =========================================================================
    # Update
    # =========================================================================

    def update_issue(self, project_name: str | None, body: Mapping[str, Any] | None) -> dict:
        """
        Apply a sparse patch to one issue in a project.

        Empty values are ignored, and `open` can only be switched to false
        (see build_update_patch).

        Returns:
            The updated document.

        Raises:
            IssueOperationError: for every failure, store errors included.
        """
        if not project_name:
            raise IssueOperationError(MSG_PROJECT_REQUIRED)

        body = body or {}
        issue_id = body.get(ID_FIELD)
        if issue_id is None:
            raise IssueOperationError(MSG_MISSING_ID)

        patch = build_update_patch(body)
        if not patch:
            raise IssueOperationError(MSG_NO_UPDATE_FIELDS, issue_id)

        parsed_id = parse_identifier(issue_id)
        if not parsed_id.ok:
            logger.warning("issue_update_failed", issue_id=issue_id, reason=parsed_id.error)
            raise IssueOperationError(MSG_COULD_NOT_UPDATE, issue_id)

        patch["updated_on"] = utcnow()
        try:
            result = self.collection.update_one(
                {"project_name": project_name, ID_FIELD: parsed_id.value}, patch
            )
            if result.modified_count != 1:
                logger.warning(
                    "issue_update_failed",
                    project_name=project_name,
                    issue_id=issue_id,
                    reason="No document found for update",
                )
                raise IssueOperationError(MSG_COULD_NOT_UPDATE, issue_id)
            issue = self.collection.find_one({ID_FIELD: parsed_id.value})
        except SQLAlchemyError as e:
            logger.exception(
                "issue_update_failed",
                project_name=project_name,
                issue_id=issue_id,
                error=str(e),
            )
            raise IssueOperationError(MSG_COULD_NOT_UPDATE, issue_id) from e

        logger.info(
            "issue_updated",
            project_name=project_name,
            issue_id=parsed_id.value,
            fields=sorted(patch),
        )
        return issue

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_issue(self, project_name: str | None, body: Mapping[str, Any] | None) -> Any:
        """
        Delete one issue in a project.

        Returns:
            The deleted identifier as sent by the client.

        Raises:
            IssueOperationError: for every failure, store errors included.
        """
        if not project_name:
            raise IssueOperationError(MSG_PROJECT_REQUIRED)

        body = body or {}
        issue_id = body.get(ID_FIELD)
        if issue_id is None:
            raise IssueOperationError(MSG_MISSING_ID)

        parsed_id = parse_identifier(issue_id)
        if not parsed_id.ok:
            logger.warning("issue_delete_failed", issue_id=issue_id, reason=parsed_id.error)
            raise IssueOperationError(MSG_COULD_NOT_DELETE, issue_id)

        try:
            result = self.collection.delete_one(
                {"project_name": project_name, ID_FIELD: parsed_id.value}
            )
        except SQLAlchemyError as e:
            logger.exception(
                "issue_delete_failed",
                project_name=project_name,
                issue_id=issue_id,
                error=str(e),
            )
            raise IssueOperationError(MSG_COULD_NOT_DELETE, issue_id) from e

        if result.deleted_count != 1:
            logger.warning(
                "issue_delete_failed",
                project_name=project_name,
                issue_id=issue_id,
                reason="No document found for deletion",
            )
            raise IssueOperationError(MSG_COULD_NOT_DELETE, issue_id)

        logger.info("issue_deleted", project_name=project_name, issue_id=parsed_id.value)
        return issue_id

    # =========================================================================
    # Maintenance
    # =========================================================================

    def purge_expired(self) -> int:
        """Remove issues past their time-to-live. Returns the count removed."""
        deleted = self.collection.delete_expired()
        if deleted:
            logger.info("expired_issues_purged", count=deleted)
        return deleted

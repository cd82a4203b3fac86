"""
Tests for IssueStore business logic.
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import IssueOperationError, IssueValidationError
from core.models import utcnow
from core.services import IssueStore

PROJECT = "apitest"


def _store_error():
    return OperationalError("statement", {}, Exception("database is locked"))


def _raise_store_error(*args, **kwargs):
    raise _store_error()


@pytest.mark.parametrize(
    "operation, body, error",
    [
        ("list_issues", {}, IssueValidationError),
        ("create_issue", {"issue_title": "t", "issue_text": "x", "created_by": "c"}, IssueValidationError),
        ("update_issue", {"_id": "a" * 32, "status_text": "x"}, IssueOperationError),
        ("delete_issue", {"_id": "a" * 32}, IssueOperationError),
    ],
)
def test_missing_project_never_touches_store(mock_collection, operation, body, error):
    store = IssueStore(mock_collection)

    with pytest.raises(error) as exc_info:
        getattr(store, operation)("", body)

    assert exc_info.value.to_payload() == {"error": "require project name for issues in URL"}
    assert mock_collection.method_calls == []


class TestCreateIssue:
    def test_defaults_and_timestamps(self, issue_store, sample_issue_body):
        issue = issue_store.create_issue(PROJECT, sample_issue_body)

        assert issue["project_name"] == PROJECT
        assert issue["issue_title"] == "t"
        assert issue["assigned_to"] == ""
        assert issue["status_text"] == ""
        assert issue["open"] is True
        assert issue["created_on"] == issue["updated_on"] == issue["expireXSecondsFrom"]
        assert len(issue["_id"]) == 32

    def test_keeps_optional_fields(self, issue_store, full_issue_body):
        issue = issue_store.create_issue(PROJECT, full_issue_body)

        assert issue["assigned_to"] == "bob"
        assert issue["status_text"] == "triaged"

    def test_ignores_client_controlled_fields(self, issue_store, sample_issue_body):
        body = {
            **sample_issue_body,
            "_id": "f" * 32,
            "open": False,
            "project_name": "elsewhere",
            "created_on": "2000-01-01",
        }

        issue = issue_store.create_issue(PROJECT, body)

        assert issue["_id"] != "f" * 32
        assert issue["open"] is True
        assert issue["project_name"] == PROJECT
        assert issue["created_on"].year != 2000

    @pytest.mark.parametrize("missing", ["issue_title", "issue_text", "created_by"])
    def test_missing_required_field(self, mock_collection, sample_issue_body, missing):
        store = IssueStore(mock_collection)
        body = {k: v for k, v in sample_issue_body.items() if k != missing}

        with pytest.raises(IssueValidationError) as exc_info:
            store.create_issue(PROJECT, body)

        assert exc_info.value.to_payload() == {"error": "required field(s) missing"}
        assert mock_collection.method_calls == []

    def test_null_required_field_counts_as_missing(self, issue_store, sample_issue_body):
        with pytest.raises(IssueValidationError):
            issue_store.create_issue(PROJECT, {**sample_issue_body, "created_by": None})

    def test_empty_string_required_field_is_accepted(self, issue_store, sample_issue_body):
        issue = issue_store.create_issue(PROJECT, {**sample_issue_body, "issue_text": ""})

        assert issue["issue_text"] == ""

    @pytest.mark.parametrize("project", ["", None])
    def test_missing_project(self, mock_collection, sample_issue_body, project):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueValidationError, match="require project name"):
            store.create_issue(project, sample_issue_body)
        assert mock_collection.method_calls == []

    def test_store_error_propagates(self, issue_store, sample_issue_body, monkeypatch):
        monkeypatch.setattr(issue_store.collection, "insert_one", _raise_store_error)

        with pytest.raises(OperationalError):
            issue_store.create_issue(PROJECT, sample_issue_body)


class TestListIssues:
    def test_scoped_to_project(self, issue_store, sample_issue_body):
        issue_store.create_issue(PROJECT, sample_issue_body)
        issue_store.create_issue("other", sample_issue_body)

        issues = issue_store.list_issues(PROJECT, {})

        assert len(issues) == 1
        assert issues[0]["project_name"] == PROJECT

    def test_ordered_by_updated_on(self, issue_store, sample_issue_body, advance_clock):
        first = issue_store.create_issue(PROJECT, sample_issue_body)
        second = issue_store.create_issue(PROJECT, sample_issue_body)
        advance_clock(5)
        issue_store.update_issue(PROJECT, {"_id": first["_id"], "status_text": "touched"})

        issues = issue_store.list_issues(PROJECT, None)

        assert [i["_id"] for i in issues] == [second["_id"], first["_id"]]

    def test_filters_combine(self, issue_store, sample_issue_body):
        issue_store.create_issue(PROJECT, {**sample_issue_body, "assigned_to": "bob"})
        closed = issue_store.create_issue(PROJECT, {**sample_issue_body, "assigned_to": "bob"})
        issue_store.create_issue(PROJECT, {**sample_issue_body, "assigned_to": "eve"})
        issue_store.update_issue(PROJECT, {"_id": closed["_id"], "open": "false"})

        issues = issue_store.list_issues(PROJECT, {"assigned_to": "bob", "open": "false"})

        assert [i["_id"] for i in issues] == [closed["_id"]]

    def test_unknown_query_keys_ignored(self, issue_store, created_issue):
        issues = issue_store.list_issues(PROJECT, {"project_name": "other", "page": "2"})

        assert [i["_id"] for i in issues] == [created_issue["_id"]]

    def test_filter_by_identifier(self, issue_store, created_issue, sample_issue_body):
        issue_store.create_issue(PROJECT, sample_issue_body)

        issues = issue_store.list_issues(PROJECT, {"_id": created_issue["_id"]})

        assert len(issues) == 1

    def test_filter_by_exact_timestamp(self, issue_store, created_issue):
        created_on = created_issue["created_on"].isoformat() + "Z"

        assert len(issue_store.list_issues(PROJECT, {"created_on": created_on})) == 1
        assert issue_store.list_issues(PROJECT, {"created_on": "2001-01-01"}) == []

    @pytest.mark.parametrize(
        "query, message",
        [
            ({"open": "yes"}, "Invalid value given for open filter: yes; must be true or false"),
            ({"_id": "123"}, "Invalid _id parameter: 123; Please check _id"),
            ({"updated_on": "soon"}, "Invalid value given for updated_on filter: soon"),
        ],
    )
    def test_invalid_filters(self, mock_collection, query, message):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueValidationError) as exc_info:
            store.list_issues(PROJECT, query)

        assert exc_info.value.message == message
        assert mock_collection.method_calls == []

    def test_missing_project(self, issue_store):
        with pytest.raises(IssueValidationError, match="require project name"):
            issue_store.list_issues("", {})

    @pytest.mark.parametrize("field", ["_id", "open", "created_on", "updated_on"])
    def test_empty_typed_filter_matches_nothing(self, mock_collection, field):
        store = IssueStore(mock_collection)

        assert store.list_issues(PROJECT, {field: ""}) == []
        assert mock_collection.method_calls == []

    def test_empty_text_filter_matches_empty_values(self, issue_store, created_issue):
        issues = issue_store.list_issues(PROJECT, {"assigned_to": ""})

        assert [i["_id"] for i in issues] == [created_issue["_id"]]


class TestUpdateIssue:
    def test_partial_update(self, issue_store, created_issue, advance_clock):
        later = advance_clock(5)

        updated = issue_store.update_issue(
            PROJECT, {"_id": created_issue["_id"], "status_text": "done", "issue_title": ""}
        )

        assert updated["status_text"] == "done"
        assert updated["issue_title"] == "t"
        assert updated["updated_on"] == later
        assert updated["updated_on"] > created_issue["updated_on"]
        assert updated["created_on"] == created_issue["created_on"]
        assert updated["expireXSecondsFrom"] == created_issue["expireXSecondsFrom"]

    def test_close_with_false_string(self, issue_store, created_issue):
        updated = issue_store.update_issue(PROJECT, {"_id": created_issue["_id"], "open": "false"})

        assert updated["open"] is False

    def test_true_string_cannot_reopen(self, issue_store, created_issue):
        issue_id = created_issue["_id"]
        issue_store.update_issue(PROJECT, {"_id": issue_id, "open": "false"})

        updated = issue_store.update_issue(
            PROJECT, {"_id": issue_id, "open": "true", "status_text": "reopen?"}
        )

        assert updated["open"] is False
        assert updated["status_text"] == "reopen?"

    def test_open_true_alone_is_an_empty_patch(self, mock_collection):
        store = IssueStore(mock_collection)
        issue_id = "a" * 32

        with pytest.raises(IssueOperationError) as exc_info:
            store.update_issue(PROJECT, {"_id": issue_id, "open": "true"})

        assert exc_info.value.to_payload() == {"error": "no update field(s) sent", "_id": issue_id}
        assert mock_collection.method_calls == []

    def test_missing_id(self, mock_collection):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueOperationError) as exc_info:
            store.update_issue(PROJECT, {"status_text": "done"})

        assert exc_info.value.to_payload() == {"error": "missing _id"}
        assert mock_collection.method_calls == []

    def test_malformed_id(self, mock_collection):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueOperationError) as exc_info:
            store.update_issue(PROJECT, {"_id": "bad", "status_text": "done"})

        assert exc_info.value.to_payload() == {"error": "could not update", "_id": "bad"}
        assert mock_collection.method_calls == []

    def test_unknown_id(self, issue_store):
        with pytest.raises(IssueOperationError, match="could not update"):
            issue_store.update_issue(PROJECT, {"_id": "0" * 32, "status_text": "done"})

    def test_other_project_cannot_update(self, issue_store, created_issue):
        with pytest.raises(IssueOperationError, match="could not update"):
            issue_store.update_issue("other", {"_id": created_issue["_id"], "status_text": "x"})

        assert issue_store.list_issues(PROJECT, {})[0]["status_text"] == ""

    def test_store_error_becomes_could_not_update(self, issue_store, created_issue, monkeypatch):
        monkeypatch.setattr(issue_store.collection, "update_one", _raise_store_error)
        issue_id = created_issue["_id"]

        with pytest.raises(IssueOperationError) as exc_info:
            issue_store.update_issue(PROJECT, {"_id": issue_id, "status_text": "x"})

        assert exc_info.value.to_payload() == {"error": "could not update", "_id": issue_id}

    def test_missing_project(self, mock_collection):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueOperationError, match="require project name"):
            store.update_issue("", {"_id": "a" * 32, "status_text": "x"})


class TestDeleteIssue:
    def test_delete(self, issue_store, created_issue):
        issue_id = created_issue["_id"]

        assert issue_store.delete_issue(PROJECT, {"_id": issue_id}) == issue_id
        assert issue_store.list_issues(PROJECT, {}) == []

    def test_second_delete_fails(self, issue_store, created_issue):
        issue_id = created_issue["_id"]
        issue_store.delete_issue(PROJECT, {"_id": issue_id})

        with pytest.raises(IssueOperationError) as exc_info:
            issue_store.delete_issue(PROJECT, {"_id": issue_id})

        assert exc_info.value.to_payload() == {"error": "could not delete", "_id": issue_id}

    def test_other_project_cannot_delete(self, issue_store, created_issue):
        with pytest.raises(IssueOperationError, match="could not delete"):
            issue_store.delete_issue("other", {"_id": created_issue["_id"]})

        assert len(issue_store.list_issues(PROJECT, {})) == 1

    @pytest.mark.parametrize("body", [{}, None, {"_id": None}])
    def test_missing_id(self, mock_collection, body):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueOperationError) as exc_info:
            store.delete_issue(PROJECT, body)

        assert exc_info.value.to_payload() == {"error": "missing _id"}
        assert mock_collection.method_calls == []

    def test_malformed_id(self, mock_collection):
        store = IssueStore(mock_collection)

        with pytest.raises(IssueOperationError, match="could not delete"):
            store.delete_issue(PROJECT, {"_id": "xyz"})
        assert mock_collection.method_calls == []

    def test_store_error_becomes_could_not_delete(self, issue_store, created_issue, monkeypatch):
        monkeypatch.setattr(issue_store.collection, "delete_one", _raise_store_error)

        with pytest.raises(IssueOperationError, match="could not delete"):
            issue_store.delete_issue(PROJECT, {"_id": created_issue["_id"]})


class TestExpiry:
    def test_ensure_expiry_index_registers_ttl(self, issue_collection):
        store = IssueStore(issue_collection, expire_after_seconds=120)

        store.ensure_expiry_index()

        assert issue_collection.expire_after_seconds == 120

    def test_purge_expired(self, issue_store, created_issue, monkeypatch):
        later = utcnow() + timedelta(seconds=issue_store.expire_after_seconds + 1)
        monkeypatch.setattr("core.repositories.issue_collection.utcnow", lambda: later)

        assert issue_store.purge_expired() == 1
        assert issue_store.list_issues(PROJECT, {}) == []

    def test_purge_keeps_fresh_issues(self, issue_store, created_issue):
        assert issue_store.purge_expired() == 0
        assert len(issue_store.list_issues(PROJECT, {})) == 1

"""
Issue field projection and coercion.

Incoming query parameters and request bodies carry every value as a string.
These helpers keep only allow-listed fields and coerce identifiers, booleans
and dates, reporting failures through ParseResult instead of raising.
"""

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from core.constants import (
    EMPTY_PATCH_VALUES,
    ID_FIELD,
    ISSUE_DATE_FIELDS,
    ISSUE_FILTER_FIELDS,
    ISSUE_TYPED_FILTER_FIELDS,
    ISSUE_UPDATE_FIELDS,
    OPEN_FILTER_VALUES,
)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of coercing a single raw value."""

    ok: bool
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any) -> "ParseResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult":
        return cls(ok=False, error=error)


def project_fields(
    source: Mapping[str, Any] | None,
    allowed: Iterable[str],
    drop_values: tuple = (None,),
) -> dict[str, Any]:
    """
    Keep only allow-listed keys, then strip keys whose value is in drop_values.

    Args:
        source: Raw query parameters or request body (None is treated as empty).
        allowed: Field allow-list.
        drop_values: Values treated as "not sent". None always means absent.

    Returns:
        New dictionary in allow-list order.
    """
    if not source:
        return {}
    projected = {}
    for key in allowed:
        if key not in source:
            continue
        value = source[key]
        if any(value is drop or (drop is not None and value == drop) for drop in drop_values):
            continue
        projected[key] = value
    return projected


def parse_identifier(raw: Any) -> ParseResult:
    """Parse a store identifier (a UUID in any form uuid.UUID accepts) to 32 hex chars."""
    try:
        return ParseResult.success(uuid.UUID(str(raw)).hex)
    except (TypeError, ValueError, AttributeError):
        return ParseResult.failure(f"Invalid _id parameter: {raw}; Please check _id")


def parse_open_filter(raw: Any) -> ParseResult:
    if raw not in OPEN_FILTER_VALUES:
        return ParseResult.failure(
            f"Invalid value given for open filter: {raw}; must be true or false"
        )
    return ParseResult.success(raw == "true")


def parse_date(raw: Any) -> ParseResult:
    """
    Parse an ISO 8601 date or datetime string into a naive UTC datetime.

    A bare calendar date resolves to midnight UTC. Offsets are converted to UTC.
    """
    if not isinstance(raw, str) or not raw.strip():
        return ParseResult.failure(f"Invalid date: {raw}")

    text = raw.strip()
    # Handle 'Z' suffix
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return ParseResult.failure(f"Invalid date: {raw}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return ParseResult.success(parsed)


def build_list_filters(query: Mapping[str, Any] | None) -> ParseResult:
    """
    Build the coerced filter set for a list request.

    Unknown keys are dropped. Non-empty `_id`, `open`, `created_on` and
    `updated_on` values are validated and coerced; the first invalid value
    fails the whole set. Empty ones are kept as "" (see has_empty_typed_filter).
    """
    filters = project_fields(query, ISSUE_FILTER_FIELDS)

    if filters.get(ID_FIELD):
        result = parse_identifier(filters[ID_FIELD])
        if not result.ok:
            return result
        filters[ID_FIELD] = result.value

    if filters.get("open"):
        result = parse_open_filter(filters["open"])
        if not result.ok:
            return result
        filters["open"] = result.value

    for field in ISSUE_DATE_FIELDS:
        if not filters.get(field):
            continue
        result = parse_date(filters[field])
        if not result.ok:
            return ParseResult.failure(
                f"Invalid value given for {field} filter: {filters[field]}"
            )
        filters[field] = result.value

    return ParseResult.success(filters)


def has_empty_typed_filter(filters: Mapping[str, Any]) -> bool:
    """True if an identifier, boolean or date filter was sent empty; no issue can match."""
    return any(filters.get(field) == "" for field in ISSUE_TYPED_FILTER_FIELDS)


def build_update_patch(body: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Build the sparse patch for a partial update.

    Fields that are absent or empty are dropped. `open` survives only as the
    literal string "false", which becomes False; any other value for `open`,
    "true" included, is dropped.
    """
    patch = project_fields(body, ISSUE_UPDATE_FIELDS, drop_values=EMPTY_PATCH_VALUES)
    if patch.get("open") == "false":
        patch["open"] = False
    else:
        patch.pop("open", None)
    return patch


__all__ = [
    "ParseResult",
    "build_list_filters",
    "build_update_patch",
    "has_empty_typed_filter",
    "parse_date",
    "parse_identifier",
    "parse_open_filter",
    "project_fields",
]

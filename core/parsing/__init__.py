# Issue field projection and coercion module

from .issue_fields import (
    ParseResult,
    build_list_filters,
    build_update_patch,
    has_empty_typed_filter,
    parse_date,
    parse_identifier,
    parse_open_filter,
    project_fields,
)

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

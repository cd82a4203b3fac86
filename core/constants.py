"""
Application constants for the Issue Tracker.

Contains issue field allow-lists, expiry settings, and client-facing messages.
"""

# =============================================================================
# Issue Fields
# =============================================================================

# Wire name of the store-assigned identifier
ID_FIELD = "_id"

# Expiry anchor consumed by the time-to-live index
EXPIRY_ANCHOR_FIELD = "expireXSecondsFrom"

# Fields a list request may filter on
ISSUE_FILTER_FIELDS = (
    ID_FIELD,
    "issue_title",
    "issue_text",
    "created_by",
    "assigned_to",
    "status_text",
    "open",
    "created_on",
    "updated_on",
)

# Fields a create request may supply
ISSUE_CREATE_FIELDS = (
    "issue_title",
    "issue_text",
    "created_by",
    "assigned_to",
    "status_text",
)

ISSUE_REQUIRED_FIELDS = ("issue_title", "issue_text", "created_by")

ISSUE_OPTIONAL_FIELDS = ("assigned_to", "status_text")

# Fields a partial update may patch
ISSUE_UPDATE_FIELDS = (
    "issue_title",
    "issue_text",
    "created_by",
    "assigned_to",
    "status_text",
    "open",
)

# Filter fields carried as date strings on the wire
ISSUE_DATE_FIELDS = ("created_on", "updated_on")

# Filter fields coerced away from strings; sent empty, they match no issue
ISSUE_TYPED_FILTER_FIELDS = (ID_FIELD, "open", *ISSUE_DATE_FIELDS)

# Raw values accepted for the open filter
OPEN_FILTER_VALUES = ("true", "false")

# Patch values stripped before an update is applied
EMPTY_PATCH_VALUES = (None, "")


# =============================================================================
# Expiry
# =============================================================================

ISSUE_EXPIRE_AFTER_SECONDS = 86400  # 1 day


# =============================================================================
# Client-facing Messages
# =============================================================================

MSG_PROJECT_REQUIRED = "require project name for issues in URL"
MSG_REQUIRED_FIELDS_MISSING = "required field(s) missing"
MSG_MISSING_ID = "missing _id"
MSG_NO_UPDATE_FIELDS = "no update field(s) sent"
MSG_COULD_NOT_UPDATE = "could not update"
MSG_COULD_NOT_DELETE = "could not delete"
MSG_DELETED = "successfully deleted"

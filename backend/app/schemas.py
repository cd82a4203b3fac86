"""
Pydantic schemas for response serialization.

Requests are read as raw query parameters and JSON objects so that absent,
empty, and unrecognized fields reach the issue store unchanged.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class IssueResponse(BaseModel):
    """A stored issue document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    project_name: str
    issue_title: str
    issue_text: str
    created_by: str
    assigned_to: str = ""
    status_text: str = ""
    open: bool = True
    created_on: datetime
    updated_on: datetime
    expire_x_seconds_from: datetime = Field(alias="expireXSecondsFrom")

    @field_serializer("created_on", "updated_on", "expire_x_seconds_from")
    def serialize_utc(self, value: datetime) -> str:
        # Stored naive; always UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class DeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: str
    id: str = Field(alias="_id")

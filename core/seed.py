"""
Sample issues inserted at startup.

Seeding is idempotent: sample issues carry fixed identifiers and only the
missing ones are inserted.
"""

from core.constants import EXPIRY_ANCHOR_FIELD
from core.logging import get_logger
from core.models import utcnow
from core.repositories import IssueCollection

logger = get_logger("seed")

SAMPLE_PROJECT = "sample"

SAMPLE_ISSUES = [
    {
        "_id": "5f1b7c3e9a0d4e2b8c6f1a2b3c4d5e6f",
        "issue_title": "Login button unresponsive",
        "issue_text": "Clicking the login button on the landing page does nothing.",
        "created_by": "alice",
        "assigned_to": "bob",
        "status_text": "in progress",
        "open": True,
    },
    {
        "_id": "8d2e4f6a1b3c4d5e9f7a6b5c4d3e2f10",
        "issue_title": "Typo in footer",
        "issue_text": "The footer reads 'Copyrigth'.",
        "created_by": "carol",
        "assigned_to": "",
        "status_text": "",
        "open": True,
    },
    {
        "_id": "0a9b8c7d6e5f4a3b2c1d0e9f8a7b6c5d",
        "issue_title": "Export to CSV drops last row",
        "issue_text": "Exports are missing the final record when more than 100 rows exist.",
        "created_by": "dave",
        "assigned_to": "alice",
        "status_text": "fixed",
        "open": False,
    },
]


def seed_sample_issues(collection: IssueCollection, project_name: str = SAMPLE_PROJECT) -> int:
    """
    Insert any sample issues not already stored.

    Timestamps and the expiry anchor are set to now, so seeded issues expire
    like any other.

    Returns:
        Number of issues inserted.
    """
    now = utcnow()
    documents = [
        {
            **issue,
            "project_name": project_name,
            "created_on": now,
            "updated_on": now,
            EXPIRY_ANCHOR_FIELD: now,
        }
        for issue in SAMPLE_ISSUES
    ]
    inserted = collection.insert_many(documents, skip_existing=True)
    logger.info("sample_issues_seeded", project_name=project_name, inserted=len(inserted))
    return len(inserted)

"""
Background job functions for the internal scheduler.

Includes:
- Issue expiry purge (time-to-live enforcement)
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from core.services import IssueStore

logger = logging.getLogger("backend.scheduler.jobs")


def run_expiry_purge_job(store: IssueStore) -> int:
    """Delete issues whose expiry anchor is older than the TTL."""
    try:
        deleted = store.purge_expired()
    except SQLAlchemyError:
        # Retried on the next interval
        logger.exception("Expiry purge failed")
        return 0
    return deleted

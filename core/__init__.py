"""
Issue Tracker Core Library.

This package provides the core functionality for the Issue Tracker,
including database management, models, repositories, services, and logging.

Usage:
    # Database
    from core.db import db
    from core.models import Issue
    from core.repositories import IssueCollection

    # Services
    from core.services import IssueStore

    # Config
    from core.config import get_settings, Settings

    # Logging
    from core.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from core.db import db
#   from core.config import get_settings
#   from core.logging import get_logger

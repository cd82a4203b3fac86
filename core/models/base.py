"""
Declarative base shared by issue models.

Defined in core.db so the DatabaseManager can create every table from one
metadata object.
"""

from core.db import Base

__all__ = ["Base"]

"""
Unified Database Management Layer.

Provides a singleton DatabaseManager for:
- Connection pooling (QueuePool for PostgreSQL and file-backed SQLite)
- A single shared connection for in-memory SQLite
- A shared session factory for the issues collection

Usage:
    from core.db import db, Base

    db.initialize()
    db.create_all_tables()
    collection = IssueCollection(db.SessionLocal)
"""

from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


def _is_in_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.database in (None, "", ":memory:") or parsed.query.get("mode") == "memory"


class DatabaseManager:
    """
    Singleton database manager with connection pooling.

    Each session checks out its own connection, so every session is its own
    transaction. In-memory SQLite is the exception: the database lives on one
    connection, shared through StaticPool.
    """

    _instance: Optional["DatabaseManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        pass  # Prevent re-initialization

    def initialize(self, database_url: str | None = None) -> None:
        """
        Initialize database connection. Call once at app startup.

        Args:
            database_url: Optional override. Uses settings.database_url if not provided.
        """
        if self._initialized:
            return

        settings = get_settings()
        url = database_url or settings.database_url

        engine_options: dict[str, Any] = {}
        if url.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
            # An in-memory database exists only on its one connection
            if _is_in_memory_sqlite(url):
                engine_options["poolclass"] = StaticPool
        else:
            engine_options.update(
                poolclass=QueuePool,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
            )

        self.engine = create_engine(
            url,
            echo=settings.debug,
            future=True,
            **engine_options,
        )

        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )

        self._initialized = True

    def create_all_tables(self) -> None:
        """Create all tables defined by models."""
        self._ensure_initialized()
        Base.metadata.create_all(bind=self.engine)

    def reset(self) -> None:
        """Reset database manager. Disposes engine and clears singleton state."""
        if hasattr(self, "engine") and self.engine:
            self.engine.dispose()
        self._initialized = False

    def _ensure_initialized(self) -> None:
        """Raise error if not initialized."""
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


# Global singleton
db = DatabaseManager()


__all__ = ["Base", "DatabaseManager", "db"]

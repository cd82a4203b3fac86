"""
FastAPI application entry point.

Uses structured logging from core.logging module.
The issue store is built once at startup and shared by every request.
"""

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core import models  # noqa: F401  registers tables on Base.metadata
from core.config import get_settings
from core.db import db
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger
from core.repositories import IssueCollection
from core.seed import seed_sample_issues
from core.services import IssueStore

from .error_handlers import register_exception_handlers
from .routers import issues as issues_router
from .scheduler import list_jobs, shutdown_scheduler, start_scheduler

# Configure structured logging
settings = get_settings()
log_level = "DEBUG" if settings.debug else "INFO"
configure_logging(level=log_level)
logger = get_logger("api")


def build_issue_store() -> IssueStore:
    """
    Initialize the database and the shared issue store.

    Creates tables, ensures the expiry index, and seeds sample issues when
    enabled. Safe to repeat: every step is idempotent.
    """
    db.initialize(settings.database_url)
    db.create_all_tables()
    logger.info("database_initialized")

    store = IssueStore(
        IssueCollection(db.SessionLocal),
        expire_after_seconds=settings.issue_expire_after_seconds,
    )
    store.ensure_expiry_index()

    if settings.seed_sample_issues:
        seed_sample_issues(store.collection)
    return store


def create_app(
    issue_store: IssueStore | None = None,
    enable_scheduler: bool | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        issue_store: Pre-built store; when omitted one is built at startup.
        enable_scheduler: Run the expiry purge job. Defaults to settings.
    """
    if enable_scheduler is None:
        enable_scheduler = settings.enable_expiry_purge

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.issue_store = issue_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Request-ID"],
    )

    # Structured request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info("app_startup", app_name=settings.app_name)

        if app.state.issue_store is None:
            app.state.issue_store = build_issue_store()
            logger.info("issue_store_initialized")

        if enable_scheduler:
            start_scheduler(app.state.issue_store)
            logger.info("scheduler_started")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        logger.info("app_shutdown")

        if enable_scheduler:
            shutdown_scheduler()
            logger.info("scheduler_stopped")

    @app.get("/health", tags=["health"])
    def health_check():
        """
        Health check endpoint (liveness probe).

        Returns minimal information to avoid exposing infrastructure details.
        """
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """
        Readiness check endpoint.

        Returns 200 if the issue store answers a round-trip, 503 if not.
        """
        store = app.state.issue_store
        ready = False
        if store is not None:
            try:
                ready = store.collection.ping()
            except SQLAlchemyError as e:
                logger.warning("store_health_check_failed", error=str(e))

        if not ready:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": {"store": False}},
            )
        return {"status": "ready", "checks": {"store": True}}

    @app.get("/health/detailed", tags=["health"])
    def health_check_detailed():
        """
        Detailed health check with scheduler status.

        Only available in debug mode to prevent information disclosure.
        """
        if settings.is_production or not settings.debug:
            return {"error": "Detailed health info only available in debug mode"}

        store = app.state.issue_store
        return {
            "status": "ok",
            "expire_after_seconds": store.collection.expire_after_seconds if store else None,
            "jobs": list_jobs(),
        }

    # API is accessible at /api/issues/{project}
    app.include_router(issues_router.router, prefix=settings.api_prefix)

    return app


app = create_app()

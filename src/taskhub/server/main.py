"""
FastAPI application factory for the TaskHub backend.
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..shared import epoch_ms_to_iso8601, now_epoch_ms
from ..shared.exceptions import register_exception_handlers
from . import dependencies
from .config import AppConfig, load_app_config
from .middleware import (
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    create_auth_middleware,
)
from .repository.models import Base
from .routers import (
    ai,
    auth,
    notes,
    notifications,
    project_members,
    projects,
    scheduler,
    tasks,
    todos,
)
from .services.ai_service import AIService
from .services.scheduler_service import SchedulerService

log = logging.getLogger(__name__)

API_PREFIX = "/api"


def _setup_alembic_config(database_url: str) -> Config:
    """
    Create an Alembic Config pointing at the bundled migration scripts.

    Args:
        database_url: Database connection string.
    """
    alembic_cfg = Config()
    alembic_cfg.set_main_option(
        "script_location",
        os.path.join(os.path.dirname(__file__), "alembic"),
    )
    alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return alembic_cfg


def run_migrations(database_url: str) -> None:
    """
    Upgrade the schema to the latest revision.

    Runs on the application's own engine so in-memory SQLite databases see
    the migrated tables.
    """
    alembic_cfg = _setup_alembic_config(database_url)
    try:
        with dependencies.get_engine().begin() as connection:
            alembic_cfg.attributes["connection"] = connection
            command.upgrade(alembic_cfg, "head")
        log.info("Database migrations completed")
    except Exception as migration_error:
        log.error("Database migration failed: %s", migration_error)
        raise RuntimeError(f"Database migration failed: {migration_error}") from migration_error


def create_tables() -> None:
    """Create all tables directly from the model metadata."""
    Base.metadata.create_all(bind=dependencies.get_engine())
    log.info("Database tables created")


def _setup_database(config: AppConfig) -> None:
    dependencies.init_database(config.get("database_url"))
    if config.get("run_migrations", True):
        run_migrations(config.get("database_url"))
    else:
        create_tables()

    if not dependencies.check_database_connection():
        if config.is_production:
            raise RuntimeError("Database connection failed")
        log.warning("Database connection failed; continuing in development mode")


def _create_ai_service(config: AppConfig) -> AIService:
    return AIService(
        base_url=config.get("ai_api_base_url"),
        api_key=config.get("ai_api_key"),
        default_model=config.get("ai_default_model"),
        embedding_model=config.get("ai_embedding_model"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: AppConfig = app.state.config
    log.info("Starting TaskHub backend (environment=%s)", config.get("environment"))

    _setup_database(config)
    dependencies.set_app_config(config)

    ai_service = _create_ai_service(config)
    dependencies.set_ai_service(ai_service)

    scheduler_service = SchedulerService(dependencies.short_lived_session, config.as_dict())
    if config.get("scheduler_enabled", True):
        scheduler_service.start_all()
    else:
        log.info("Background scheduler disabled by configuration")
    dependencies.set_scheduler_service(scheduler_service)

    try:
        yield
    finally:
        log.info("Shutting down TaskHub backend")
        scheduler_service.stop_all()
        dependencies.set_scheduler_service(None)
        await ai_service.close()
        dependencies.set_ai_service(None)
        dependencies.dispose_database()


def _setup_middleware(app: FastAPI, config: AppConfig) -> None:
    # Starlette runs the last added middleware first
    auth_middleware_class = create_auth_middleware(config)
    app.add_middleware(auth_middleware_class, config=config)
    app.add_middleware(
        RateLimitMiddleware,
        window_ms=config.get("rate_limit_window_ms"),
        max_requests=config.rate_limit_max,
        path_prefix=API_PREFIX,
        skip_paths=(f"{API_PREFIX}/health",),
    )
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=config.get("max_body_bytes"))
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    allowed_origins = config.get("cors_allowed_origins", [])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    log.info("CORSMiddleware added with origins: %s", allowed_origins)

    app.add_middleware(RequestLoggingMiddleware)


def _setup_routers(app: FastAPI) -> None:
    app.include_router(auth.router, prefix=API_PREFIX, tags=["Auth"])
    app.include_router(projects.router, prefix=API_PREFIX, tags=["Projects"])
    app.include_router(project_members.router, prefix=API_PREFIX, tags=["Project Members"])
    app.include_router(tasks.router, prefix=API_PREFIX, tags=["Tasks"])
    app.include_router(todos.router, prefix=API_PREFIX, tags=["Todos"])
    app.include_router(notes.router, prefix=API_PREFIX, tags=["Notes"])
    app.include_router(notifications.router, prefix=API_PREFIX, tags=["Notifications"])
    app.include_router(ai.router, prefix=API_PREFIX, tags=["AI"])
    app.include_router(scheduler.router, prefix=API_PREFIX, tags=["Scheduler"])
    log.info("Routers mounted at %s", API_PREFIX)


def _setup_health_checks(app: FastAPI) -> None:
    @app.get("/health", tags=["Health"])
    async def health():
        """Basic health check endpoint."""
        return {
            "status": "OK",
            "timestamp": epoch_ms_to_iso8601(now_epoch_ms()),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
        }

    @app.get(f"{API_PREFIX}/health", tags=["Health"])
    async def api_health():
        return {
            "success": True,
            "message": "TaskHub API is running",
            "timestamp": epoch_ms_to_iso8601(now_epoch_ms()),
        }


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Resolved configuration; loaded from the environment when omitted

    Returns:
        FastAPI app whose lifespan initializes the database, the AI service
        and the background scheduler
    """
    config = config or load_app_config()

    app = FastAPI(
        title="TaskHub Backend",
        version="1.0.0",
        description="Projects, tasks, todos, notes and AI writing tools.",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.started_at = time.monotonic()
    app.state.include_error_stack = config.is_development

    _setup_middleware(app, config)
    _setup_routers(app)
    _setup_health_checks(app)
    register_exception_handlers(app)
    return app

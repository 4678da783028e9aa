"""
Defines FastAPI dependency injectors for the database session, the
application configuration and the service layer.
"""
from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager

from fastapi import Depends, HTTPException, status
from sqlalchemy import create_engine, event, pool, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker

from ..shared.auth import TokenManager
from .config import AppConfig
from .repository.ai_usage_log_repository import AIUsageLogRepository
from .repository.note_repository import NoteRepository
from .repository.notification_repository import NotificationRepository
from .repository.project_member_repository import ProjectMemberRepository
from .repository.project_repository import ProjectRepository
from .repository.task_repository import TaskRepository
from .repository.todo_repository import TodoRepository
from .repository.user_repository import UserRepository
from .services.ai_service import AIService
from .services.note_service import NoteService
from .services.notification_service import NotificationService
from .services.project_member_service import ProjectMemberService
from .services.project_service import ProjectService
from .services.task_service import TaskService
from .services.text_analysis_service import TextAnalysisService
from .services.todo_service import TodoService
from .services.usage_tracking_service import UsageTrackingService
from .services.user_service import UserService

log = logging.getLogger(__name__)

engine: Engine | None = None
SessionLocal: sessionmaker | None = None

app_config: AppConfig | None = None
token_manager: TokenManager | None = None
ai_service: AIService | None = None
scheduler_service = None


def init_database(database_url: str):
    """Initialize database with appropriate configuration based on database dialect."""
    global engine, SessionLocal
    if SessionLocal is not None:
        log.warning("Database already initialized.")
        return

    url = make_url(database_url)
    dialect_name = url.get_dialect().name

    engine_kwargs = {}

    if dialect_name == "sqlite":
        engine_kwargs = {
            "poolclass": pool.StaticPool,
            "connect_args": {"check_same_thread": False},
        }
        log.info("Configuring SQLite database (single-connection mode)")

    elif dialect_name in ("postgresql", "mysql"):
        engine_kwargs = {
            "pool_size": 10,
            "max_overflow": 20,
            "pool_timeout": 30,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        }
        if dialect_name == "postgresql":
            engine_kwargs["connect_args"] = {
                "options": "-c idle_in_transaction_session_timeout=60000 -c statement_timeout=120000"
            }
            log.info(
                "Configuring %s database with connection pooling and transaction timeouts "
                "(idle_in_transaction=60s, statement=120s)",
                dialect_name,
            )
        else:
            log.info("Configuring %s database with connection pooling", dialect_name)

    else:
        log.warning("Using default configuration for dialect: %s", dialect_name)

    engine = create_engine(database_url, **engine_kwargs)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        if dialect_name == "sqlite":
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    log.debug("Database initialized: %s", url.render_as_string(hide_password=True))
    log.info("Database initialized successfully")


def dispose_database():
    """Dispose the engine and forget the session factory."""
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
        log.info("Database engine disposed")
    engine = None
    SessionLocal = None


def get_engine() -> Engine:
    if engine is None:
        raise RuntimeError("Database not configured")
    return engine


def check_database_connection() -> bool:
    """Run ``SELECT 1`` against the configured database."""
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        log.error("Database connection check failed: %s", e)
        return False


def set_app_config(config: AppConfig):
    """Called during startup to provide the application configuration."""
    global app_config, token_manager
    app_config = config
    token_manager = TokenManager(
        secret=config.get("jwt_secret"),
        expires_in=config.get("jwt_expires_in", "7d"),
    )
    log.debug("Application configuration provided.")


def set_ai_service(service: AIService | None):
    global ai_service
    ai_service = service


def set_scheduler_service(service):
    global scheduler_service
    scheduler_service = service


def get_app_config() -> AppConfig:
    """FastAPI dependency to get the application configuration."""
    if app_config is None:
        log.critical("Application configuration accessed before it was set!")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application configuration not yet initialized.",
        )
    return app_config


def get_token_manager() -> TokenManager:
    if token_manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token manager not yet initialized.",
        )
    return token_manager


def get_ai_service() -> AIService:
    """FastAPI dependency to get the shared AIService."""
    if ai_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service not yet initialized.",
        )
    return ai_service


def get_scheduler_service():
    if scheduler_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduler not yet initialized.",
        )
    return scheduler_service


def _is_connection_error(exc: Exception, _depth: int = 0) -> bool:
    """
    Check if an exception is a transient database connection error.

    Uses SQLAlchemy's connection_invalidated flag, the exception type and
    finally the error message, then walks the ``__cause__`` chain.
    """
    if _depth > 10:
        return False

    if getattr(exc, "connection_invalidated", False):
        return True

    exc_type_name = type(exc).__name__
    if exc_type_name == "DisconnectionError":
        return True

    is_operational_or_interface = exc_type_name in ("OperationalError", "InterfaceError")

    error_str = str(exc).lower()
    connection_error_patterns = [
        # PostgreSQL / psycopg2
        "ssl connection has been closed unexpectedly",
        "connection reset by peer",
        "connection timed out",
        "server closed the connection unexpectedly",
        "could not connect to server",
        "connection refused",
        "terminating connection due to administrator command",
        "the connection is closed",
        # SQLite ("database is locked" is contention, not a dropped connection)
        "disk i/o error",
        "unable to open database file",
        # Generic
        "connection was closed",
        "broken pipe",
        "connection already closed",
    ]
    if is_operational_or_interface and any(p in error_str for p in connection_error_patterns):
        return True

    if exc.__cause__ is not None:
        return _is_connection_error(exc.__cause__, _depth + 1)

    return False


@contextmanager
def short_lived_session():
    """
    Context manager for short-lived database sessions.

    Used by background jobs and the auth middleware. Commits on success,
    rolls back and re-raises on error, and always closes the session.
    """
    if SessionLocal is None:
        raise RuntimeError("Database not configured")

    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        try:
            db.rollback()
        except Exception as rollback_error:
            log.warning("Failed to rollback after error: %s", rollback_error)
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    if SessionLocal is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured.",
        )
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        try:
            db.rollback()
        except Exception as rollback_error:
            log.warning("Failed to rollback after error: %s", rollback_error)

        if _is_connection_error(e):
            log.warning(
                "Database connection error during request (connection may have been closed by server): %s",
                str(e),
            )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database connection temporarily unavailable. Please retry.",
            ) from e
        raise
    finally:
        try:
            db.close()
        except Exception as close_error:
            log.warning("Failed to close database session: %s", close_error)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """FastAPI dependency to get an instance of UserService."""
    return UserService(UserRepository(db))


def get_project_service(db: Session = Depends(get_db)) -> ProjectService:
    """FastAPI dependency to get an instance of ProjectService."""
    return ProjectService(
        project_repository=ProjectRepository(db),
        member_repository=ProjectMemberRepository(db),
        task_repository=TaskRepository(db),
    )


def get_project_member_service(db: Session = Depends(get_db)) -> ProjectMemberService:
    project_service = ProjectService(
        project_repository=ProjectRepository(db),
        member_repository=ProjectMemberRepository(db),
        task_repository=TaskRepository(db),
    )
    return ProjectMemberService(
        project_service=project_service,
        member_repository=ProjectMemberRepository(db),
        user_repository=UserRepository(db),
    )


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    """FastAPI dependency to get an instance of TaskService."""
    project_service = ProjectService(
        project_repository=ProjectRepository(db),
        member_repository=ProjectMemberRepository(db),
        task_repository=TaskRepository(db),
    )
    return TaskService(task_repository=TaskRepository(db), project_service=project_service)


def get_notification_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
) -> NotificationService:
    return NotificationService(
        notification_repository=NotificationRepository(db),
        todo_repository=TodoRepository(db),
        retention_days=config.get("notification_retention_days", 7),
    )


def get_todo_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> TodoService:
    """FastAPI dependency to get an instance of TodoService."""
    return TodoService(
        todo_repository=TodoRepository(db),
        notification_service=notification_service,
        note_repository=NoteRepository(db),
    )


def get_usage_tracking_service(db: Session = Depends(get_db)) -> UsageTrackingService:
    return UsageTrackingService(AIUsageLogRepository(db))


def get_note_service(
    db: Session = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
) -> NoteService:
    """FastAPI dependency to get an instance of NoteService."""
    return NoteService(
        note_repository=NoteRepository(db),
        todo_repository=TodoRepository(db),
        usage_repository=AIUsageLogRepository(db),
        ai_service=ai,
    )


def get_text_analysis_service(
    config: AppConfig = Depends(get_app_config),
) -> TextAnalysisService:
    return TextAnalysisService(
        api_url=config.get("ai_analyze_api_url"),
        api_key=config.get("ai_analyze_api_key"),
    )

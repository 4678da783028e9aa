"""
Command line interface: ``taskhub run``, ``migrate``, ``init-db`` and ``recompute-progress``.
"""

import logging
import os
import sys

import click
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .common.logging_config import configure_logging

log = logging.getLogger(__name__)


def error_exit(message: str):
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


def _load_environment(system_env: bool):
    """Load ``.env`` unless told to use the process environment only."""
    if system_env:
        return None
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(dotenv_path=env_path, override=True)
        logging_config_path = os.getenv("LOGGING_CONFIG_PATH")
        if logging_config_path and not os.path.isabs(logging_config_path):
            os.environ["LOGGING_CONFIG_PATH"] = os.path.abspath(logging_config_path)
    return env_path


def _load_config(system_env: bool, **overrides):
    from .server.config import ConfigurationError, load_app_config

    env_path = _load_environment(system_env)
    configure_logging(os.getenv("LOGGING_CONFIG_PATH"))

    if system_env:
        log.warning("Skipping .env file loading due to --system-env flag.")
    elif env_path:
        log.info("Loaded environment variables from: %s", env_path)
    else:
        log.warning(".env file not found in the current directory or parent directories.")

    try:
        return load_app_config(use_dotenv=False, **overrides)
    except ConfigurationError as e:
        error_exit(f"Invalid configuration: {e}")


system_env_option = click.option(
    "-u",
    "--system-env",
    is_flag=True,
    default=False,
    help="Use system environment variables only; do not load .env file.",
)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__, "-v", "--version", help="Show the version and exit.")
def cli():
    """TaskHub backend."""


@cli.command(name="run")
@click.option("--host", default=None, help="Bind address (defaults to HOST).")
@click.option("--port", type=int, default=None, help="Port (defaults to PORT).")
@system_env_option
def run(host, port, system_env):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .server.main import create_app

    config = _load_config(system_env, host=host, port=port)
    app = create_app(config)
    log.info("Serving on %s:%s", config.get("host"), config.get("port"))
    uvicorn.run(app, host=config.get("host"), port=config.get("port"), log_config=None)


@cli.command(name="migrate")
@system_env_option
def migrate(system_env):
    """Upgrade the database schema to the latest revision."""
    from .server import dependencies
    from .server.main import run_migrations

    config = _load_config(system_env)
    dependencies.init_database(config.get("database_url"))
    try:
        run_migrations(config.get("database_url"))
    except RuntimeError as e:
        error_exit(str(e))
    finally:
        dependencies.dispose_database()
    click.echo("Database is up to date.")


@cli.command(name="init-db")
@system_env_option
def init_db(system_env):
    """Create all tables directly from the models, without migrations."""
    from .server import dependencies
    from .server.main import create_tables

    config = _load_config(system_env)
    dependencies.init_database(config.get("database_url"))
    try:
        create_tables()
    finally:
        dependencies.dispose_database()
    click.echo("Database tables created.")


@cli.command(name="recompute-progress")
@system_env_option
def recompute_progress(system_env):
    """Recompute the stored progress of every project from its tasks."""
    from .server import dependencies
    from .server.repository import ProjectMemberRepository, ProjectRepository, TaskRepository
    from .server.services.project_service import ProjectService

    config = _load_config(system_env)
    dependencies.init_database(config.get("database_url"))
    try:
        with dependencies.short_lived_session() as db:
            service = ProjectService(
                project_repository=ProjectRepository(db),
                member_repository=ProjectMemberRepository(db),
                task_repository=TaskRepository(db),
            )
            count = service.update_all_projects_progress()
    finally:
        dependencies.dispose_database()
    click.echo(f"Recomputed progress for {count} projects.")


def main():
    cli()


if __name__ == "__main__":
    main()

"""
Application configuration.

Defines the configuration schema and loads values from the environment
(optionally populated from a ``.env`` file).
"""

import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

log = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "your-fallback-secret-key"

APP_SCHEMA_PARAMS: List[Dict[str, Any]] = [
    {
        "name": "database_url",
        "env": "DATABASE_URL",
        "type": "string",
        "default": "sqlite:///./taskhub.db",
        "description": "SQLAlchemy database URL (SQLite or PostgreSQL).",
    },
    {
        "name": "environment",
        "env": ["APP_ENV", "NODE_ENV"],
        "type": "string",
        "default": "development",
        "description": "Deployment environment: development or production.",
    },
    {
        "name": "host",
        "env": "HOST",
        "type": "string",
        "default": "127.0.0.1",
        "description": "Host address for the HTTP server.",
    },
    {
        "name": "port",
        "env": "PORT",
        "type": "integer",
        "default": 3001,
        "description": "Port for the HTTP server.",
    },
    {
        "name": "cors_allowed_origins",
        "env": "CORS_ORIGIN",
        "type": "list",
        "default": ["http://localhost:5173"],
        "description": "Comma-separated list of allowed CORS origins.",
    },
    {
        "name": "jwt_secret",
        "env": "JWT_SECRET",
        "type": "string",
        "default": DEFAULT_JWT_SECRET,
        "description": "Secret used to sign access tokens.",
    },
    {
        "name": "jwt_expires_in",
        "env": "JWT_EXPIRES_IN",
        "type": "string",
        "default": "7d",
        "description": "Access token lifetime (e.g. 3600, 12h, 7d).",
    },
    {
        "name": "allow_default_user",
        "env": "AUTH_ALLOW_DEFAULT_USER",
        "type": "boolean",
        "default": False,
        "description": "Serve unauthenticated requests as the built-in default user.",
    },
    {
        "name": "rate_limit_window_ms",
        "env": "RATE_LIMIT_WINDOW_MS",
        "type": "integer",
        "default": 15 * 60 * 1000,
        "description": "Rate limiting window for /api routes.",
    },
    {
        "name": "rate_limit_max",
        "env": "RATE_LIMIT_MAX",
        "type": "integer",
        "default": None,
        "description": "Requests allowed per window per client (100 in production, 1000 otherwise).",
    },
    {
        "name": "max_body_bytes",
        "env": "MAX_BODY_BYTES",
        "type": "integer",
        "default": 10 * 1024 * 1024,
        "description": "Maximum accepted request body size.",
    },
    {
        "name": "scheduler_enabled",
        "env": "SCHEDULER_ENABLED",
        "type": "boolean",
        "default": True,
        "description": "Start the notification and cleanup background jobs.",
    },
    {
        "name": "notification_interval_seconds",
        "env": "NOTIFICATION_INTERVAL_SECONDS",
        "type": "integer",
        "default": 60,
        "description": "Interval of the todo reminder sweep.",
    },
    {
        "name": "cleanup_interval_seconds",
        "env": "CLEANUP_INTERVAL_SECONDS",
        "type": "integer",
        "default": 3600,
        "description": "Interval of the expired notification cleanup.",
    },
    {
        "name": "notification_retention_days",
        "env": "NOTIFICATION_RETENTION_DAYS",
        "type": "integer",
        "default": 7,
        "description": "Days a read notification is kept after its last update.",
    },
    {
        "name": "run_migrations",
        "env": "RUN_MIGRATIONS",
        "type": "boolean",
        "default": True,
        "description": "Run alembic migrations at startup.",
    },
    {
        "name": "ai_api_base_url",
        "env": "SILICONFLOW_API_BASE_URL",
        "type": "string",
        "default": "https://api.siliconflow.cn/v1",
        "description": "Base URL of the OpenAI-compatible completion API.",
    },
    {
        "name": "ai_api_key",
        "env": "SILICONFLOW_API_KEY",
        "type": "string",
        "default": None,
        "description": "API key for the completion API.",
    },
    {
        "name": "ai_default_model",
        "env": "AI_DEFAULT_MODEL",
        "type": "string",
        "default": "moonshotai/Kimi-K2-Instruct-0905",
        "description": "Model used when a request does not name one.",
    },
    {
        "name": "ai_embedding_model",
        "env": "AI_EMBEDDING_MODEL",
        "type": "string",
        "default": "BAAI/bge-large-zh-v1.5",
        "description": "Model used for note embeddings.",
    },
    {
        "name": "ai_analyze_api_url",
        "env": "AI_ANALYZE_API_URL",
        "type": "string",
        "default": None,
        "description": "Optional external text analysis endpoint.",
    },
    {
        "name": "ai_analyze_api_key",
        "env": "AI_ANALYZE_API_KEY",
        "type": "string",
        "default": None,
        "description": "Bearer key for the external text analysis endpoint.",
    },
    {
        "name": "logging_config_path",
        "env": "LOGGING_CONFIG_PATH",
        "type": "string",
        "default": None,
        "description": "Optional YAML or INI logging configuration file.",
    },
]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigurationError(ValueError):
    """Raised when a configuration value cannot be coerced to its declared type."""


def _coerce(param: Dict[str, Any], raw: str) -> Any:
    name = param["name"]
    param_type = param["type"]
    if param_type == "integer":
        try:
            return int(raw.strip())
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if param_type == "boolean":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")
    if param_type == "list":
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


class AppConfig:
    """Resolved configuration values with a ``get(key, default)`` accessor."""

    def __init__(self, values: Dict[str, Any]):
        self._values = dict(values)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def is_production(self) -> bool:
        return str(self.get("environment", "development")).lower() == "production"

    @property
    def is_development(self) -> bool:
        return str(self.get("environment", "development")).lower() == "development"

    @property
    def rate_limit_max(self) -> int:
        configured = self._values.get("rate_limit_max")
        if configured is not None:
            return configured
        return 100 if self.is_production else 1000

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        values = self.as_dict()
        values.update(overrides)
        return AppConfig(values)


def load_app_config(
    environ: Optional[Dict[str, str]] = None,
    use_dotenv: bool = True,
    **overrides: Any,
) -> AppConfig:
    """
    Build the application configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)
        use_dotenv: Load a .env file from the working directory first
        **overrides: Explicit values that take precedence over the environment

    Returns:
        AppConfig with every schema parameter resolved

    Raises:
        ConfigurationError: If a value cannot be coerced to its declared type
    """
    if environ is None:
        if use_dotenv:
            env_path = find_dotenv(usecwd=True)
            if env_path:
                load_dotenv(dotenv_path=env_path, override=False)
                log.info("Loaded environment variables from: %s", env_path)
        environ = dict(os.environ)

    values: Dict[str, Any] = {}
    for param in APP_SCHEMA_PARAMS:
        env_names = param["env"] if isinstance(param["env"], list) else [param["env"]]
        raw = next((environ[n] for n in env_names if environ.get(n) not in (None, "")), None)
        values[param["name"]] = _coerce(param, raw) if raw is not None else param["default"]

    values.update({k: v for k, v in overrides.items() if v is not None})

    if values["jwt_secret"] == DEFAULT_JWT_SECRET:
        log.warning("JWT_SECRET is not set. Using the insecure fallback secret.")

    return AppConfig(values)

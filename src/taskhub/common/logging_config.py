"""
Logging configuration for the server and CLI.
"""

import logging
import logging.config
import os
import sys
from typing import Optional

import yaml

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_from_file(config_path: Optional[str] = None) -> bool:
    """
    Configure logging from a YAML (dictConfig) or INI (fileConfig) file.

    Falls back to the LOGGING_CONFIG_PATH environment variable when no path
    is given.

    Returns:
        True if a configuration file was found and applied, False otherwise
    """
    config_path = config_path or os.getenv("LOGGING_CONFIG_PATH")
    if not config_path:
        return False
    if not os.path.isfile(config_path):
        logging.getLogger(__name__).warning(
            "Logging config file '%s' not found. Using default logging.", config_path
        )
        return False

    if config_path.endswith((".yaml", ".yml")):
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        config.setdefault("version", 1)
        logging.config.dictConfig(config)
    else:
        logging.config.fileConfig(config_path, disable_existing_loggers=False)
    return True


def configure_logging(config_path: Optional[str] = None, level: int = logging.INFO) -> None:
    """Apply file-based logging if available, otherwise a stdout handler."""
    if configure_from_file(config_path):
        logging.getLogger(__name__).info("Logging configured from %s", config_path or os.getenv("LOGGING_CONFIG_PATH"))
        return

    root = logging.getLogger()
    if not any(getattr(h, "_taskhub_default", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        handler._taskhub_default = True
        root.addHandler(handler)
    root.setLevel(level)

"""
Centralized logging setup for headless_render.

This module provides functions to configure and obtain logger instances
throughout the application. It leverages the `ConfigurationManager` to
load logging settings from YAML configuration files, supporting
console and rotating file handlers.

The console handler always writes to stderr: `print` and `screenshot`
stream rendered bytes to stdout when no output path is given.

Key Functions:
- `setup_logging()`: Initializes the logging system based on external configuration.
                     The CLI calls it once the `--config` file has been loaded.
- `get_logger(name)`: Returns a logger instance for the specified module name.
                      Ensures logging is initialized with fallback if needed.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Any

from headless_render.core.config import ConfigurationManager

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# _logging_initialized: Global flag to prevent repeated initialization of the logging system.
_logging_initialized = False


def _basic_config(level: int) -> None:
    logging.basicConfig(level=level, format=DEFAULT_FORMAT, stream=sys.stderr)


def setup_logging(config: Optional[ConfigurationManager] = None, verbose: bool = False, force: bool = False) -> None:
    """
    Sets up centralized logging using settings from the provided `ConfigurationManager`.

    This function configures the root logger with handlers (console, rotating file)
    and formatting as specified in the 'logging' section of the configuration.
    It falls back to basic logging if the configuration is missing or incomplete.

    Args:
        config (Optional[ConfigurationManager]): The application's configuration manager instance.
            If None, the global `config_manager` from `headless_render.core.config` is used.
        verbose (bool): Force the DEBUG level regardless of the configured level.
        force (bool): Reconfigure even if logging was already initialized
            (used by the CLI after an alternate config file was loaded).
    """
    global _logging_initialized
    if _logging_initialized and not force:
        logging.getLogger(__name__).debug("Logging setup_logging: Already initialized.")
        return

    current_config = config
    if current_config is None:
        from headless_render.core.config import config_manager as global_config_manager
        current_config = global_config_manager

    log_settings: Optional[Dict[str, Any]] = current_config.get("logging") if current_config else None

    root_logger = logging.getLogger()
    # Drop handlers from a previous setup (or from basicConfig) to avoid duplicate records.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if not log_settings:
        _basic_config(logging.DEBUG if verbose else logging.INFO)
        logging.warning("Logging setup: 'logging' section not found in configuration. Using basicConfig.")
        _logging_initialized = True
        return

    log_level_str = "DEBUG" if verbose else str(log_settings.get("level", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    log_format = log_settings.get("format", DEFAULT_FORMAT)

    root_logger.setLevel(log_level)
    formatter = logging.Formatter(log_format)

    handlers_settings = log_settings.get("handlers", {}) or {}

    console_handler_settings = handlers_settings.get("console", {}) or {}
    if console_handler_settings.get("enabled", False):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    file_handler_settings = handlers_settings.get("file", {}) or {}
    if file_handler_settings.get("enabled", False):
        # Relative paths resolve against the working directory the command runs in.
        log_file_path = os.path.abspath(file_handler_settings.get("path", "logs/headless_render.log"))
        max_bytes = int(file_handler_settings.get("max_bytes", 10 * 1024 * 1024))
        backup_count = int(file_handler_settings.get("backup_count", 5))

        try:
            os.makedirs(os.path.dirname(log_file_path), exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=log_file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            # File logging is optional; keep running with whatever handlers exist.
            logging.error(f"Logging setup: Failed to configure file logging at '{log_file_path}': {e}. File logging disabled.", exc_info=True)

    _logging_initialized = True
    logging.debug(f"Logging system initialized. Level: {log_level_str}. Format: '{log_format}'.")


def get_logger(name: str) -> logging.Logger:
    """
    Retrieves a logger instance with the specified name.

    This function acts as a wrapper around `logging.getLogger(name)`.
    It also ensures that `setup_logging()` has been called at least once
    (using the global configuration) before a logger is dispensed, which makes
    it safe to call from any module at import time.

    Args:
        name (str): The name for the logger, typically `__name__` of the calling module.

    Returns:
        logging.Logger: An instance of `logging.Logger`.
    """
    if not _logging_initialized:
        setup_logging()

    return logging.getLogger(name)

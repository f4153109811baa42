"""
Configuration management for headless_render.

This module provides a singleton `ConfigurationManager` class to load and access
configuration settings from a YAML file. The packaged `config/default.yaml`
holds the per-command defaults (paper format, margins, timeout, wait condition),
the browser type, the batch settle delay and the logging section. An alternate
file can be loaded with `load_config(path)` (the CLI exposes this as `--config`).

Key Features:
- Loads settings from the packaged default YAML file unless a path is given.
- Provides a global `config_manager` instance for easy access.
- Supports dot notation for accessing nested keys (e.g., "commands.print.format").
- Custom exceptions for configuration-related errors.
"""
import logging
import os
import yaml
from typing import Any, Dict, Optional

# CONFIG_DIR: Directory holding the packaged YAML configuration files.
CONFIG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "config")

# DEFAULT_CONFIG_FILE: The file loaded when no explicit path is requested.
DEFAULT_CONFIG_FILE = os.path.join(CONFIG_DIR, "default.yaml")

class ConfigError(Exception):
    """Base class for all configuration-related errors."""
    pass

class ConfigFileNotFoundError(ConfigError):
    """Raised when the requested configuration file cannot be found."""
    pass

class InvalidYamlError(ConfigError):
    """Raised when a configuration file contains invalid YAML syntax or is not a dictionary."""
    pass

class ConfigurationManager:
    """
    Manages loading and accessing configuration settings from YAML files.

    This class is implemented as a singleton. The first time an instance is created,
    it loads the packaged default configuration. Subsequent instantiations return
    the existing instance.
    """
    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}
    _current_path: str = ""

    def __new__(cls) -> 'ConfigurationManager':
        """
        Ensures that only one instance of ConfigurationManager is created (Singleton pattern).
        Loads the default configuration upon first instantiation.
        """
        if cls._instance is None:
            cls._instance = super(ConfigurationManager, cls).__new__(cls)
            cls._instance.load_config()
        return cls._instance

    def load_config(self, path: Optional[str] = None) -> None:
        """
        Loads configuration from a YAML file.

        Args:
            path (Optional[str]): Path of the YAML file to load. If None,
                                  `DEFAULT_CONFIG_FILE` is used.

        Raises:
            ConfigFileNotFoundError: If the YAML file is not found.
            InvalidYamlError: If the YAML file is malformed or not a dictionary.
        """
        config_file_path = path or DEFAULT_CONFIG_FILE

        try:
            with open(config_file_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigFileNotFoundError(
                f"Configuration file not found at '{config_file_path}'."
            )
        except yaml.YAMLError as e:
            raise InvalidYamlError(
                f"Error parsing YAML in configuration file '{config_file_path}': {e}"
            )
        if not isinstance(loaded, dict):
            raise InvalidYamlError(
                f"Configuration file '{config_file_path}' does not contain a valid YAML dictionary."
            )
        self._config = loaded
        self._current_path = config_file_path

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Retrieves a configuration value for the given key.

        Supports accessing nested values using dot notation (e.g., "commands.print.format").
        If the key is not found, returns the provided default value.

        Args:
            key (str): The configuration key to retrieve.
            default (Optional[Any]): The value to return if the key is not found.

        Returns:
            Any: The configuration value if found, otherwise the default value.
        """
        value = self._config
        try:
            for k_part in key.split("."):
                if isinstance(value, dict):
                    value = value[k_part]
                else:
                    # A non-dict value sits in the middle of the dotted path.
                    return default
            return value
        except (KeyError, TypeError):
            return default

    def reload_config(self, path: Optional[str] = None) -> None:
        """
        Reloads the configuration, either from `path` or from the file currently loaded.

        Args:
            path (Optional[str]): The file to load instead. If None, re-reads the
                                  currently active file.
        """
        old_path = self._current_path
        self.load_config(path or old_path or None)
        logging.getLogger(__name__).info(
            f"Configuration reloaded from '{self._current_path}' (previously '{old_path}')."
        )

    @property
    def current_path(self) -> str:
        """
        Returns the path of the currently loaded configuration file.
        """
        return self._current_path

# Global instance of ConfigurationManager to be used by other modules.
config_manager = ConfigurationManager()

def get_config(key: str, default: Optional[Any] = None) -> Any:
    """
    A convenience function to access configuration values via the global `config_manager`.

    Args:
        key (str): The configuration key (dot notation for nested values).
        default (Optional[Any]): Default value if the key is not found.

    Returns:
        Any: The configuration value or the default.
    """
    return config_manager.get(key, default)

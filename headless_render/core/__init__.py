from .config import get_config, config_manager, ConfigurationManager, ConfigError, ConfigFileNotFoundError, InvalidYamlError
from .exceptions import (
    HeadlessRenderError,
    OptionError,
    MalformedCookieError,
    InvalidViewportError,
    ComponentError,
    RendererError,
    NavigationError,
    NavigationTimeoutError,
    StorageError,
    ManifestParseError,
)
from .logger import setup_logging, get_logger

# RenderManager and BatchController live in core.manager / core.batch; they are
# not re-exported here because they import the components package, which in
# turn imports from core.

__all__ = [
    # Config
    "get_config",
    "config_manager",
    "ConfigurationManager",
    "ConfigError",
    "ConfigFileNotFoundError",
    "InvalidYamlError",
    # Logger
    "setup_logging",
    "get_logger",
    # Exceptions
    "HeadlessRenderError",
    "OptionError",
    "MalformedCookieError",
    "InvalidViewportError",
    "ComponentError",
    "RendererError",
    "NavigationError",
    "NavigationTimeoutError",
    "StorageError",
    "ManifestParseError",
]

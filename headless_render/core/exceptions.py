"""
Custom exception classes for headless_render.
"""
from typing import Optional


class HeadlessRenderError(Exception):
    """
    Base class for all custom exceptions in headless_render.

    Attributes:
        message (str): A human-readable description of the error.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


# --- Option Translation Related Exceptions ---
class OptionError(HeadlessRenderError):
    """Raised when a command-line value cannot be translated into engine options."""
    def __init__(self, message: str):
        super().__init__(message)


class MalformedCookieError(OptionError):
    """
    Raised when a cookie string lacks the ':' delimiter.

    Attributes:
        cookie (str): The offending cookie string.
    """
    def __init__(self, cookie: str):
        super().__init__(f"cookie must contain : delimiter, got '{cookie}'")
        self.cookie = cookie


class InvalidViewportError(OptionError):
    """
    Raised when a viewport spec does not look like WIDTHxHEIGHT.

    Attributes:
        viewport (str): The offending viewport spec.
    """
    def __init__(self, viewport: str):
        super().__init__(f"viewport must be of the form WIDTHxHEIGHT (e.g. 800x600), got '{viewport}'")
        self.viewport = viewport


# --- Component Related Exceptions ---
class ComponentError(HeadlessRenderError):
    """
    A general base class for errors originating from within a specific component
    (e.g., Renderer, Storage, Batch).

    Attributes:
        component_name (str): Name of the component where the error originated.
    """
    def __init__(self, component_name: str, message: str):
        full_message = f"Error in component '{component_name}': {message}"
        super().__init__(full_message)
        self.component_name = component_name


class RendererError(ComponentError):
    """Raised for errors specific to the Renderer component (browser launch, PDF or screenshot generation)."""
    def __init__(self, message: str):
        super().__init__(component_name="Renderer", message=message)


class NavigationError(RendererError):
    """
    Raised when the browser fails to navigate to a target.

    Attributes:
        url (str): The URL that failed to load.
        original_exception (Optional[Exception]): The underlying engine exception, if any.
    """
    def __init__(self, url: str, message: str, original_exception: Optional[Exception] = None):
        self.url = url
        self.original_exception = original_exception
        super().__init__(f"Failed to navigate to '{url}': {message}")


class NavigationTimeoutError(NavigationError):
    """Raised when navigation does not satisfy its wait condition before the timeout elapses."""
    def __init__(self, url: str, timeout_ms: int, original_exception: Optional[Exception] = None):
        self.timeout_ms = timeout_ms
        super().__init__(url, f"timed out after {timeout_ms}ms", original_exception=original_exception)


class StorageError(ComponentError):
    """Raised for errors specific to the Storage component (file system reads, stdout writes)."""
    def __init__(self, message: str):
        super().__init__(component_name="Storage", message=message)


class ManifestParseError(StorageError):
    """
    Raised when a batch manifest is missing, is not valid JSON, or does not match
    the expected structure.

    Attributes:
        path (str): Path of the manifest file.
        original_exception (Optional[Exception]): The underlying exception, if any.
    """
    def __init__(self, path: str, message: str, original_exception: Optional[Exception] = None):
        full_message = f"Invalid batch manifest '{path}': {message}"
        if original_exception:
            full_message += f" (Original exception: {str(original_exception)})"
        super().__init__(full_message)
        self.path = path
        self.original_exception = original_exception

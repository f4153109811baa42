"""
Components of headless_render.

- renderer: browser lifecycle and page-level render operations (Playwright).
- storage: batch manifest loading and standard-output streaming.
"""
from .renderer.playwright_manager import PlaywrightManager
from .storage.file_storage import FileStorage

__all__ = [
    "PlaywrightManager",
    "FileStorage",
]

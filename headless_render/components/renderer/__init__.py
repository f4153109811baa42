"""
Renderer component for headless_render.

This sub-package drives a headless browser (via Playwright) to print pages
to PDF and capture them as PNG screenshots.
"""
from .playwright_manager import PlaywrightManager

__all__ = [
    "PlaywrightManager",
]

"""
Storage component for headless_render.

Loads batch manifests and streams rendered output to standard output.
"""
from .file_storage import FileStorage

__all__ = [
    "FileStorage",
]

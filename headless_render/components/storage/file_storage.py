"""
File system storage for headless_render.

This module provides the `FileStorage` class, which loads the JSON batch
manifest consumed by `bulk-print` and streams rendered bytes to standard
output when a command is given no output path. Rendered files themselves are
written by the browser engine.
"""
import json
import os
import sys
from typing import Any, BinaryIO, Optional

from pydantic import ValidationError

from headless_render.core.exceptions import ManifestParseError, StorageError
from headless_render.core.logger import get_logger
from headless_render.core.models import BatchManifest

logger = get_logger(__name__)


class FileStorage:
    """
    Reads manifests from, and writes rendered output to, the local machine.
    """

    def load_json(self, path: str) -> Any:
        """
        Loads and returns data from the JSON file at `path`.

        Raises:
            ManifestParseError: If the file does not exist, cannot be read, or is not valid JSON.
        """
        if not os.path.exists(path):
            raise ManifestParseError(path, "file not found")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ManifestParseError(path, "failed to decode JSON", original_exception=e)
        except OSError as e:
            raise ManifestParseError(path, "failed to read file", original_exception=e)

    def load_manifest(self, path: str) -> BatchManifest:
        """
        Loads a batch manifest and validates its structure before any entry is processed.

        The manifest is a JSON object with a `data` array; each element needs
        `htmlFile`, `tmpPDFFile` and a `pdfObject` (`isLandscape`, `footerTemplate`,
        `footerHeight`).

        Args:
            path (str): Path of the manifest file.

        Returns:
            BatchManifest: The validated manifest.

        Raises:
            ManifestParseError: If the file is missing, is not valid JSON, lacks `data`,
                                or any entry is missing a field or has a wrongly typed one.
        """
        raw = self.load_json(path)
        if not isinstance(raw, dict) or "data" not in raw:
            raise ManifestParseError(path, "missing top-level 'data' field")

        try:
            manifest = BatchManifest.model_validate(raw)
        except ValidationError as e:
            raise ManifestParseError(path, "structure does not match the manifest format", original_exception=e)

        logger.info(f"Loaded batch manifest '{path}' with {len(manifest.data)} entries.")
        return manifest

    def write_stdout(self, buffer: bytes, stream: Optional[BinaryIO] = None) -> None:
        """
        Writes `buffer` verbatim to the process's binary standard output.

        Args:
            buffer (bytes): Rendered PDF or PNG bytes.
            stream (Optional[BinaryIO]): Alternative binary stream; defaults to `sys.stdout.buffer`.

        Raises:
            StorageError: If the stream cannot be written (e.g., a closed pipe).
        """
        target = stream if stream is not None else sys.stdout.buffer
        try:
            target.write(buffer)
            target.flush()
        except OSError as e:
            logger.error(f"Failed to write {len(buffer)} bytes to standard output: {e}", exc_info=True)
            raise StorageError(f"Failed to write to standard output: {e}")
        logger.debug(f"Wrote {len(buffer)} bytes to standard output.")

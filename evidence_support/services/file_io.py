"""
File I/O service for snapshot and evidence trees.

Handles:
- Copying whole files into a destination tree
- Lazy creation of parent directories
- Recursive removal of trees
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from evidence_support.core.models import SourceIOError


class FileIOService:
    """Service for the copy and delete operations of the snapshot engine."""

    def ensure_directory(self, path: Path | str) -> Path:
        """Create a directory and its parents if absent."""
        path = Path(path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SourceIOError(f"Could not create directory: {e}", path) from e
        return path

    def copy_file(self, source: Path | str, destination: Path | str) -> Path:
        """
        Copy a file's full content to destination, overwriting it.

        Parent directories of the destination are created as needed.
        """
        source = Path(source)
        destination = Path(destination)

        self.ensure_directory(destination.parent)
        try:
            shutil.copy2(source, destination)
        except OSError as e:
            raise SourceIOError(f"Could not copy {source} to {destination}: {e}", source) from e

        logging.debug(f"FileIOService - Copied {source} -> {destination}")
        return destination

    def remove_tree(self, path: Path | str) -> bool:
        """
        Recursively delete a directory tree.

        Returns:
            True if something was deleted, False if the path did not exist
        """
        path = Path(path)
        if not path.exists():
            return False

        try:
            shutil.rmtree(path)
        except OSError as e:
            raise SourceIOError(f"Could not delete {path}: {e}", path) from e

        logging.debug(f"FileIOService - Removed {path}")
        return True

"""
Snapshot tree scanner.

Builds the relative-path index of a snapshot root:
- Recursive traversal of every file, hidden ones included
- Posix-style relative keys, identical on every platform
- Errors propagate to the caller instead of being skipped
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from evidence_support.core.models import SnapshotMissingError


@dataclass
class SnapshotIndex:
    """Relative path -> absolute path mapping of one snapshot tree."""
    root_path: Path
    files: dict[str, Path] = field(default_factory=dict)

    def __contains__(self, relative_path: str) -> bool:
        return relative_path in self.files

    def __len__(self) -> int:
        return len(self.files)

    def get(self, relative_path: str) -> Path | None:
        return self.files.get(relative_path)

    def iter_files(self) -> Iterator[tuple[str, Path]]:
        """Iterate over (relative path, absolute path) in sorted order."""
        for rel_path in sorted(self.files):
            yield rel_path, self.files[rel_path]


class SnapshotScanner:
    """Scans a snapshot root into a SnapshotIndex."""

    def scan(self, root_path: Path | str) -> SnapshotIndex:
        """
        Index every file below a snapshot root.

        Raises:
            SnapshotMissingError: if the root does not exist
            OSError: if a directory below the root cannot be listed
        """
        root_path = Path(os.path.abspath(root_path))

        if not root_path.is_dir():
            logging.error(f"SnapshotScanner - Snapshot root not found: {root_path}")
            raise SnapshotMissingError(root_path)

        index = SnapshotIndex(root_path=root_path)

        def on_walk_error(error: OSError):
            logging.error(f"SnapshotScanner - Walk error at {error.filename}: {error}")
            raise error

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_walk_error):
            dirnames.sort()
            current_path = Path(dirpath)

            for filename in sorted(filenames):
                file_path = current_path / filename
                rel_path = file_path.relative_to(root_path).as_posix()
                index.files[rel_path] = file_path

        logging.debug(f"SnapshotScanner - Indexed {len(index)} files under {root_path}")
        return index

"""
Path pattern resolution for monitoring targets.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional


WILDCARD = '*'


def substitute_date_tokens(pattern: str, now: datetime) -> str:
    """Replace every {YYYY}, {MM} and {DD} placeholder with the date of ``now``."""
    return (
        pattern
        .replace('{YYYY}', f"{now.year:04d}")
        .replace('{MM}', f"{now.month:02d}")
        .replace('{DD}', f"{now.day:02d}")
    )


class PatternResolver:
    """
    Expands a target path pattern into the files currently on disk.

    A missing file or directory is an ordinary empty result, not an error.
    """

    def resolve(self, pattern: str, now: Optional[datetime] = None) -> list[Path]:
        """
        Resolve a pattern to existing file paths.

        Args:
            pattern: Path template with optional date placeholders and a
                wildcard in its last segment
            now: Moment used for date substitution (defaults to the local time)

        Returns:
            Sorted absolute paths of matching files
        """
        resolved = substitute_date_tokens(pattern, now or datetime.now())

        if WILDCARD not in resolved:
            path = Path(resolved)
            if path.is_file():
                return [Path(os.path.abspath(path))]
            logging.debug(f"PatternResolver - No file at {resolved}")
            return []

        directory, file_pattern = self._split(resolved)
        if not directory.is_dir():
            logging.debug(f"PatternResolver - Directory not found for pattern {resolved}")
            return []

        with os.scandir(directory) as entries:
            matches = [
                Path(os.path.abspath(entry.path))
                for entry in entries
                if entry.is_file() and fnmatch.fnmatch(entry.name, file_pattern)
            ]
        return sorted(matches)

    @staticmethod
    def _split(resolved: str) -> tuple[Path, str]:
        """Split at the last path separator into directory and filename pattern."""
        separators = {'/', os.sep}
        if os.altsep:
            separators.add(os.altsep)
        index = max(resolved.rfind(sep) for sep in separators)

        if index < 0:
            return Path('.'), resolved
        return Path(resolved[:index] or resolved[0]), resolved[index + 1:]

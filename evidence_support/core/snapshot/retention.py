"""
Snapshot retention policy.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from evidence_support.core.models import NotificationSink
from evidence_support.services.file_io import FileIOService


class RetentionManager:
    """Deletes snapshot trees once they are no longer needed."""

    def __init__(self, notifier: NotificationSink, file_io: Optional[FileIOService] = None):
        self.notifier = notifier
        self.file_io = file_io or FileIOService()

    def discard(self, *roots: Path | str) -> bool:
        """
        Recursively delete each root. Missing roots are ignored.

        Every failure is reported separately; the remaining roots are
        still processed.

        Returns:
            True if no deletion failed
        """
        ok = True
        for root in roots:
            try:
                if self.file_io.remove_tree(root):
                    logging.info(f"RetentionManager - Deleted snapshot {root}")
            except Exception as e:
                logging.error(f"RetentionManager - Failed to delete snapshot {root}: {e}")
                self.notifier.notify_error(f"Failed to delete snapshot {root}: {e}")
                ok = False
        return ok

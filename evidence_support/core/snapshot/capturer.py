"""
Snapshot capture.

Copies the files matched by each monitoring target into
``<snapshot root>/<target name>/``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from evidence_support.core.models import (
    MonitoringTarget,
    NotificationSink,
    OperationError,
)
from evidence_support.core.snapshot.resolver import PatternResolver
from evidence_support.services.file_io import FileIOService


class SnapshotCapturer:
    """
    Captures a snapshot of every monitoring target.

    Fail-fast: the first unexpected I/O fault aborts the snapshot and is
    reported once through the notification sink. Targets that match no
    files contribute nothing and do not get a subdirectory.
    """

    def __init__(
        self,
        notifier: NotificationSink,
        resolver: Optional[PatternResolver] = None,
        file_io: Optional[FileIOService] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.notifier = notifier
        self.resolver = resolver or PatternResolver()
        self.file_io = file_io or FileIOService()
        self.clock = clock

    def create_snapshot(
        self,
        snapshot_root: Path | str,
        targets: Iterable[MonitoringTarget]
    ) -> bool:
        """
        Populate a snapshot root.

        Args:
            snapshot_root: Directory receiving one subdirectory per target
            targets: Targets to capture

        Returns:
            True if every target was processed, False if the snapshot was
            aborted by an I/O fault (already reported)
        """
        snapshot_root = Path(snapshot_root)

        try:
            self.file_io.ensure_directory(snapshot_root)
            copied = 0
            for target in targets:
                copied += self._capture_target(snapshot_root, target)
        except Exception as e:
            error = OperationError.from_exception(e, snapshot_root)
            logging.exception(f"SnapshotCapturer - Snapshot {snapshot_root} aborted: {error}")
            self.notifier.notify_error(f"Failed to create snapshot {snapshot_root}: {e}")
            return False

        logging.info(f"SnapshotCapturer - Captured {copied} files into {snapshot_root}")
        return True

    def _capture_target(self, snapshot_root: Path, target: MonitoringTarget) -> int:
        """Copy every file matched by one target. Returns the number copied."""
        sources = self.resolver.resolve(target.path_pattern, self.clock())
        if not sources:
            logging.info(f"SnapshotCapturer - Target '{target.name}' matched no files")
            return 0

        target_dir = self.file_io.ensure_directory(snapshot_root / target.name)
        for source in sources:
            self.file_io.copy_file(source, target_dir / source.name)

        return len(sources)

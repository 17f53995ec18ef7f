"""
Evidence extraction engine.

Compares an earlier and a later snapshot tree and collects into an
evidence tree every file that is:
- Added (only in the later snapshot)
- Changed (content differs between the snapshots)

Unchanged files are skipped and removed files are never evidenced.
Changed files are copied whole; there is no byte-range diffing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from evidence_support.core.models import (
    EntryStatus,
    EvidenceEntry,
    EvidenceReport,
    NotificationSink,
    OperationError,
    SnapshotMissingError,
)
from evidence_support.core.snapshot.retention import RetentionManager
from evidence_support.core.snapshot.scanner import SnapshotScanner
from evidence_support.services.file_io import FileIOService
from evidence_support.services.hashing import HashAlgorithm, HashingService


class EvidenceExtractor:
    """
    Computes the difference between two snapshots.

    Content equality is decided on full file content: a size mismatch is
    a shortcut to CHANGED, equal sizes fall through to a hash of both files.
    """

    def __init__(
        self,
        notifier: NotificationSink,
        hashing: Optional[HashingService] = None,
        scanner: Optional[SnapshotScanner] = None,
        file_io: Optional[FileIOService] = None,
        retention: Optional[RetentionManager] = None,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    ):
        self.notifier = notifier
        self.hashing = hashing or HashingService(default_algorithm=hash_algorithm)
        self.scanner = scanner or SnapshotScanner()
        self.file_io = file_io or FileIOService()
        self.retention = retention or RetentionManager(notifier, self.file_io)

    def compare(
        self,
        earlier_root: Path | str,
        later_root: Path | str
    ) -> EvidenceReport:
        """
        Classify every path of two snapshot trees.

        Raises:
            SnapshotMissingError: if either root does not exist
            OSError: on read failures
        """
        earlier = self.scanner.scan(earlier_root)
        later = self.scanner.scan(later_root)

        report = EvidenceReport(earlier_root=earlier.root_path, later_root=later.root_path)

        for rel_path, later_path in later.iter_files():
            earlier_path = earlier.get(rel_path)

            if earlier_path is None:
                status = EntryStatus.ADDED
            elif self._content_differs(earlier_path, later_path):
                status = EntryStatus.CHANGED
            else:
                status = EntryStatus.UNCHANGED

            report.add(EvidenceEntry(
                relative_path=rel_path,
                status=status,
                earlier_path=earlier_path,
                later_path=later_path,
            ))

        for rel_path, earlier_path in earlier.iter_files():
            if rel_path not in later:
                report.add(EvidenceEntry(
                    relative_path=rel_path,
                    status=EntryStatus.REMOVED,
                    earlier_path=earlier_path,
                ))

        logging.info(f"EvidenceExtractor - Compared snapshots: {report.summary()}")
        return report

    def extract_evidence(
        self,
        earlier_root: Path | str,
        later_root: Path | str,
        evidence_path: Path | str,
        keep_snapshots: bool = False
    ) -> bool:
        """
        Copy added and changed files of the later snapshot into evidence_path.

        The evidence directory is only created when a difference exists.
        Failures are reported through the notification sink and yield False.
        Unless keep_snapshots is set, both snapshot roots are deleted
        afterwards, whether or not the comparison succeeded.

        Returns:
            True if at least one file was written to the evidence tree
        """
        has_difference = False

        try:
            report = self.compare(earlier_root, later_root)
            has_difference = self._write_evidence(report, Path(evidence_path))
        except SnapshotMissingError as e:
            logging.error(f"EvidenceExtractor - {e}")
            self.notifier.notify_error(f"Cannot extract evidence. {e}")
            has_difference = False
        except Exception as e:
            error = OperationError.from_exception(e, evidence_path)
            logging.exception(f"EvidenceExtractor - Evidence extraction failed: {error}")
            self.notifier.notify_error(f"Evidence extraction failed: {e}")
            has_difference = False
        finally:
            if not keep_snapshots:
                self.retention.discard(earlier_root, later_root)

        return has_difference

    def _write_evidence(self, report: EvidenceReport, evidence_path: Path) -> bool:
        """Copy every evidence entry. Parent directories are created lazily."""
        written = 0
        for entry in report.iter_evidence():
            destination = evidence_path.joinpath(*entry.relative_path.split('/'))
            self.file_io.copy_file(entry.later_path, destination)
            written += 1

        if written:
            logging.info(f"EvidenceExtractor - Wrote {written} files to {evidence_path}")
        else:
            logging.info("EvidenceExtractor - No differences between snapshots")
        return written > 0

    def _content_differs(self, earlier_path: Path, later_path: Path) -> bool:
        if earlier_path.stat().st_size != later_path.stat().st_size:
            return True
        return not self.hashing.same_content(earlier_path, later_path)

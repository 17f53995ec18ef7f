"""
Monitoring session state machine.

A session moves between two states:
- IDLE: no observation window is open
- ACTIVE: snapshot1 has been captured, the window is open

start() reloads targets and settings from the configuration source and
captures snapshot1. stop() captures snapshot2 with the current targets,
extracts the evidence and applies the retention policy.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from evidence_support.core.models import (
    AppSettings,
    ConfigSource,
    MonitoringTarget,
    NotificationSink,
    SessionState,
)
from evidence_support.core.snapshot.capturer import SnapshotCapturer
from evidence_support.core.snapshot.extractor import EvidenceExtractor


STATUS_STARTED = "Monitoring started."
STATUS_STOPPED = "Monitoring stopped."
MESSAGE_NO_DIFFERENCES = "No differences were found."

SESSION_FOLDER_FORMAT = '%Y%m%d_%H%M%S'
SNAPSHOT1_DIR = 'snapshot1'
SNAPSHOT2_DIR = 'snapshot2'
EVIDENCE_DIR = 'evidence'

StatusObserver = Callable[[str], None]


class MonitoringSession:
    """
    Sequences snapshot capture and evidence extraction.

    All public methods are safe to call from several threads; the target
    registry and the session state share one re-entrant lock.
    """

    def __init__(
        self,
        config: ConfigSource,
        notifier: NotificationSink,
        capturer: Optional[SnapshotCapturer] = None,
        extractor: Optional[EvidenceExtractor] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.config = config
        self.notifier = notifier
        self.clock = clock
        self.capturer = capturer or SnapshotCapturer(notifier, clock=clock)
        self.extractor = extractor or EvidenceExtractor(notifier)

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._targets: list[MonitoringTarget] = []
        self._observers: list[StatusObserver] = []
        self._settings: Optional[AppSettings] = None
        self._session_folder: Optional[Path] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def is_monitoring_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def status_text(self) -> str:
        """Short label for the current state."""
        return "Monitoring" if self.is_monitoring_active() else "Idle"

    @property
    def session_folder(self) -> Optional[Path]:
        """Folder of the current session, or of the last one once stopped."""
        with self._lock:
            return self._session_folder

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """
        Open an observation window.

        Returns:
            True if the session became active
        """
        with self._lock:
            if self._state == SessionState.ACTIVE:
                logging.debug("MonitoringSession - start() ignored, already active")
                return False

            try:
                targets = list(self.config.get_monitoring_targets())
                settings = self.config.get_app_settings()
            except Exception as e:
                logging.exception("MonitoringSession - Failed to load configuration")
                self.notifier.notify_error(f"Failed to load configuration: {e}")
                return False

            self._targets = targets
            self._settings = settings
            self._session_folder = self._allocate_session_folder(Path(settings.evidence_save_path))

            logging.info(
                f"MonitoringSession - Starting session in {self._session_folder} "
                f"with {len(targets)} targets"
            )
            self.capturer.create_snapshot(self._session_folder / SNAPSHOT1_DIR, self._targets)

            self._state = SessionState.ACTIVE
            self._emit_status(STATUS_STARTED)
            return True

    def stop(self) -> bool:
        """
        Close the observation window and collect evidence.

        Returns:
            True if the session became idle
        """
        with self._lock:
            if self._state == SessionState.IDLE:
                logging.debug("MonitoringSession - stop() ignored, already idle")
                return False

            folder = self._session_folder
            snapshot1 = folder / SNAPSHOT1_DIR
            snapshot2 = folder / SNAPSHOT2_DIR

            self.capturer.create_snapshot(snapshot2, list(self._targets))

            has_difference = self.extractor.extract_evidence(
                snapshot1,
                snapshot2,
                folder / EVIDENCE_DIR,
                keep_snapshots=self._settings.keep_snapshot,
            )
            if not has_difference:
                self.notifier.notify_info(MESSAGE_NO_DIFFERENCES)

            self._state = SessionState.IDLE
            logging.info(f"MonitoringSession - Session {folder} stopped")
            self._emit_status(STATUS_STOPPED)
            return True

    def _allocate_session_folder(self, save_path: Path) -> Path:
        """Timestamped folder under save_path, suffixed _1, _2 ... if already taken."""
        stamp = self.clock().strftime(SESSION_FOLDER_FORMAT)
        folder = save_path / stamp
        counter = 1
        while folder.exists():
            folder = save_path / f"{stamp}_{counter}"
            counter += 1
        return folder

    # -------------------------------------------------------------------------
    # Target registry
    # -------------------------------------------------------------------------

    def add_monitoring_target(self, target: MonitoringTarget) -> None:
        with self._lock:
            self._targets.append(target)

    def remove_monitoring_target(self, name: str) -> bool:
        """Remove every target with the given name. Returns False if none matched."""
        with self._lock:
            remaining = [t for t in self._targets if t.name != name]
            removed = len(self._targets) - len(remaining)
            self._targets = remaining
            return removed > 0

    def get_monitoring_targets(self) -> tuple[MonitoringTarget, ...]:
        """Snapshot of the registry in insertion order."""
        with self._lock:
            return tuple(self._targets)

    # -------------------------------------------------------------------------
    # Status observers
    # -------------------------------------------------------------------------

    def add_status_observer(self, callback: StatusObserver) -> None:
        """Add a callback to be notified of state transitions."""
        with self._lock:
            self._observers.append(callback)

    def remove_status_observer(self, callback: StatusObserver) -> None:
        with self._lock:
            if callback in self._observers:
                self._observers.remove(callback)

    def _emit_status(self, status: str) -> None:
        for callback in list(self._observers):
            try:
                callback(status)
            except Exception:
                logging.exception(f"MonitoringSession - Status observer failed for '{status}'")

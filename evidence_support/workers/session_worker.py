"""
Workers for monitoring session transitions.

Snapshot capture and evidence extraction block until the whole target
set has been copied or compared, so a Qt host runs ``start``/``stop``
through a ``SessionWorker`` on a ``SessionThread`` to keep its UI
thread responsive.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from PyQt6.QtCore import QObject, Qt, QThread, pyqtSignal, pyqtSlot

from evidence_support.core.models import NotificationSink, OperationError
from evidence_support.core.session import MonitoringSession


class SessionAction(Enum):
    """Transition requested from a session worker."""
    START = "start"
    STOP = "stop"


class SessionSignals(QObject):
    """
    Signals for session worker communication.

    Emitted from the worker thread, delivered to the UI thread through
    queued connections.
    """
    # Status string published by the session ("Monitoring started." ...)
    status = pyqtSignal(str)

    # Transition finished; True when the session changed state
    finished = pyqtSignal(bool)

    # Transition raised instead of reporting through the notifier
    error = pyqtSignal(str, str)  # (error_type, message)


class SessionWorker(QObject):
    """
    Runs one session transition.

    Usage:
        worker = SessionWorker(session, SessionAction.STOP)
        thread = SessionThread(worker)
        worker.signals.finished.connect(on_finished)
        thread.start()
    """

    def __init__(
        self,
        session: MonitoringSession,
        action: SessionAction,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.signals = SessionSignals()
        self.session = session
        self.action = action
        self._transitioned: Optional[bool] = None
        self._error: Optional[OperationError] = None

    @property
    def transitioned(self) -> Optional[bool]:
        """Whether the session changed state; None until the worker has run."""
        return self._transitioned

    @property
    def error(self) -> Optional[OperationError]:
        """Error info if the transition raised."""
        return self._error

    @pyqtSlot()
    def run(self) -> None:
        """Perform the transition, relaying session status while it runs."""
        self.session.add_status_observer(self._relay_status)
        try:
            if self.action == SessionAction.START:
                self._transitioned = self.session.start()
            else:
                self._transitioned = self.session.stop()
            self.signals.finished.emit(self._transitioned)

        except Exception as e:
            self._error = OperationError.from_exception(e)
            self.signals.error.emit(self._error.error_type, self._error.message)

        finally:
            self.session.remove_status_observer(self._relay_status)

    def _relay_status(self, message: str) -> None:
        self.signals.status.emit(message)


class SessionThread(QThread):
    """
    Thread that owns one session worker and quits when it is done.

    Usage:
        thread = SessionThread(worker)
        thread.start()
        thread.wait()
    """

    def __init__(
        self,
        worker: SessionWorker,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        # Connect signals (quit is called directly from the worker thread)
        self.started.connect(self.worker.run)
        self.worker.signals.finished.connect(self.quit, Qt.ConnectionType.DirectConnection)
        self.worker.signals.error.connect(self.quit, Qt.ConnectionType.DirectConnection)


class QtNotificationSink(QObject):
    """
    Notification sink that re-emits messages as Qt signals.

    Connect ``info``/``error`` to message boxes or a status bar; queued
    connections deliver them on the UI thread.
    """

    info = pyqtSignal(str)
    error = pyqtSignal(str)

    def notify_info(self, message: str) -> None:
        self.info.emit(message)

    def notify_error(self, message: str) -> None:
        self.error.emit(message)


NotificationSink.register(QtNotificationSink)

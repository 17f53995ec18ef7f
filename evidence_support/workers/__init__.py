"""
Background workers for Qt hosts.

Runs monitoring session transitions off the UI thread and relays
session status and notifications as Qt signals.
"""

from evidence_support.workers.session_worker import (
    SessionAction,
    SessionSignals,
    SessionThread,
    SessionWorker,
    QtNotificationSink,
)

__all__ = [
    'SessionAction',
    'SessionSignals',
    'SessionThread',
    'SessionWorker',
    'QtNotificationSink',
]

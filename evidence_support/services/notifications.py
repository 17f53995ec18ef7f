"""
Notification sinks that deliver engine messages to an operator.
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

from evidence_support.core.models import NotificationSink


class LoggingNotificationSink(NotificationSink):
    """
    Routes notifications to the logging system.

    When a stream is given, messages are also echoed to it so that a
    console operator sees them regardless of the configured log level.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def notify_info(self, message: str) -> None:
        logging.info(f"Notification - {message}")
        self._echo(message)

    def notify_error(self, message: str) -> None:
        logging.error(f"Notification - {message}")
        self._echo(f"ERROR: {message}")

    def _echo(self, text: str) -> None:
        if self.stream is not None:
            print(text, file=self.stream, flush=True)

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from evidence_support.core.models import (
    AppSettings,
    ConfigError,
    ConfigSource,
    MonitoringTarget,
    NotificationSink,
)


FIXED_NOW = datetime(2024, 3, 7, 10, 11, 12)


class RecordingNotifier(NotificationSink):
    """Notification sink that keeps every message."""

    def __init__(self):
        self.infos: list[str] = []
        self.errors: list[str] = []

    def notify_info(self, message: str) -> None:
        self.infos.append(message)

    def notify_error(self, message: str) -> None:
        self.errors.append(message)


class StaticConfigSource(ConfigSource):
    """Config source returning fixed values; counts how often it is read."""

    def __init__(self, settings: AppSettings | None = None, targets=None, fail: bool = False):
        self.settings = settings
        self.targets = list(targets or [])
        self.fail = fail
        self.reads = 0

    def get_app_settings(self) -> AppSettings:
        if self.fail or self.settings is None:
            raise ConfigError("settings section is incomplete")
        return self.settings

    def get_monitoring_targets(self) -> list[MonitoringTarget]:
        self.reads += 1
        return list(self.targets)


def write_file(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding='utf-8')
    return path


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()

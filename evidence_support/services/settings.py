"""
Application settings management.

Settings live in a JSON document with two sections:

    {
      "settings": {"evidence_save_path": "...", "keep_snapshot": false},
      "targets": {"AppLog": "/var/log/app/{YYYY}{MM}{DD}/*.log"}
    }

The document is re-read on every call so that each monitoring session
starts from the current file contents.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from evidence_support.core.models import (
    AppSettings,
    ConfigError,
    ConfigSource,
    MonitoringTarget,
)


SETTINGS_SECTION = 'settings'
TARGETS_SECTION = 'targets'


class SettingsManager(ConfigSource):
    """Configuration source backed by a JSON settings file."""

    def __init__(self, settings_path: Optional[Path | str] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'EvidenceSupport' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'evidence-support' / 'settings.json'

    def get_app_settings(self) -> AppSettings:
        """Read the settings section."""
        data = self.load()

        section = data.get(SETTINGS_SECTION)
        if not isinstance(section, dict):
            raise ConfigError(f"'{SETTINGS_SECTION}' section not found in {self.settings_path}")

        save_path = section.get('evidence_save_path')
        keep_snapshot = section.get('keep_snapshot')

        if not isinstance(save_path, str) or not save_path.strip() or not isinstance(keep_snapshot, bool):
            raise ConfigError(
                f"'{SETTINGS_SECTION}' section is incomplete or invalid in {self.settings_path}"
            )

        return AppSettings(evidence_save_path=save_path, keep_snapshot=keep_snapshot)

    def get_monitoring_targets(self) -> list[MonitoringTarget]:
        """Read the targets section, preserving document order."""
        data = self.load()

        section = data.get(TARGETS_SECTION)
        if section is None:
            return []
        if not isinstance(section, dict):
            raise ConfigError(f"'{TARGETS_SECTION}' section must map names to path patterns")

        targets = []
        for name, pattern in section.items():
            if not isinstance(pattern, str):
                raise ConfigError(f"Path pattern for target '{name}' must be a string")
            try:
                targets.append(MonitoringTarget(name=name, path_pattern=pattern))
            except ValueError as e:
                raise ConfigError(str(e)) from e

        return targets

    def load(self) -> dict[str, Any]:
        """Load the raw settings document from disk."""
        if not self.settings_path.exists():
            raise ConfigError(f"Settings file not found: {self.settings_path}")

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.error(f"SettingsManager - Failed to read {self.settings_path}: {e}")
            raise ConfigError(f"Could not read settings file {self.settings_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {self.settings_path} must contain a JSON object")

        return data

    def save(
        self,
        settings: AppSettings,
        targets: Optional[list[MonitoringTarget]] = None
    ) -> bool:
        """Save settings and targets to disk."""
        data = {
            SETTINGS_SECTION: {
                'evidence_save_path': settings.evidence_save_path,
                'keep_snapshot': settings.keep_snapshot,
            },
            TARGETS_SECTION: {t.name: t.path_pattern for t in targets or []},
        }

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            return True
        except OSError as e:
            logging.error(f"SettingsManager - Failed to save {self.settings_path}: {e}")
            return False

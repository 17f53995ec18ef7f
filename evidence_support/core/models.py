"""
Core data models for the evidence support tool.

This module defines the data structures shared by the snapshot engine
and the monitoring session:
- Monitoring targets and application settings
- Evidence comparison models
- Error models
- Collaborator interfaces (configuration source, notification sink)

All models are UI-agnostic and can be driven from a CLI, a Qt host,
or tests alike.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterator, Optional


# =============================================================================
# Enumerations
# =============================================================================

class EntryStatus(Enum):
    """Classification of a snapshot-relative path between two snapshots."""
    ADDED = auto()      # Exists only in the later snapshot
    CHANGED = auto()    # Exists in both, content differs
    UNCHANGED = auto()  # Exists in both, content identical
    REMOVED = auto()    # Exists only in the earlier snapshot

    @property
    def is_evidence(self) -> bool:
        """Whether entries of this status are copied into the evidence tree."""
        return self in (EntryStatus.ADDED, EntryStatus.CHANGED)


class SessionState(Enum):
    """State of a monitoring session."""
    IDLE = auto()
    ACTIVE = auto()


# =============================================================================
# Configuration Models
# =============================================================================

@dataclass(frozen=True)
class MonitoringTarget:
    """
    A named set of source files to monitor.

    ``name`` doubles as the subdirectory name inside every snapshot, so it
    must be usable as a directory name. ``path_pattern`` may contain the
    date placeholders ``{YYYY}``, ``{MM}``, ``{DD}`` and a ``*`` wildcard in
    its filename segment.
    """
    name: str
    path_pattern: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Monitoring target name must not be empty")
        if self.name in (".", "..") or any(
            sep and sep in self.name for sep in ("/", os.sep, os.altsep)
        ):
            raise ValueError(f"Monitoring target name '{self.name}' is not a valid directory name")
        if not self.path_pattern or not self.path_pattern.strip():
            raise ValueError(f"Monitoring target '{self.name}' has an empty path pattern")


@dataclass(frozen=True)
class AppSettings:
    """Settings read once at the start of every monitoring session."""
    evidence_save_path: str
    keep_snapshot: bool = False


# =============================================================================
# Evidence Models
# =============================================================================

@dataclass
class EvidenceEntry:
    """Comparison outcome for a single snapshot-relative path."""
    relative_path: str
    status: EntryStatus
    earlier_path: Optional[Path] = None
    later_path: Optional[Path] = None

    @property
    def is_evidence(self) -> bool:
        return self.status.is_evidence


@dataclass
class EvidenceReport:
    """Result of comparing two snapshot trees."""
    earlier_root: Path
    later_root: Path
    entries: dict[str, EvidenceEntry] = field(default_factory=dict)

    def add(self, entry: EvidenceEntry) -> None:
        self.entries[entry.relative_path] = entry

    def count(self, status: EntryStatus) -> int:
        """Number of entries with the given status."""
        return sum(1 for entry in self.entries.values() if entry.status == status)

    @property
    def added_count(self) -> int:
        return self.count(EntryStatus.ADDED)

    @property
    def changed_count(self) -> int:
        return self.count(EntryStatus.CHANGED)

    @property
    def unchanged_count(self) -> int:
        return self.count(EntryStatus.UNCHANGED)

    @property
    def removed_count(self) -> int:
        return self.count(EntryStatus.REMOVED)

    @property
    def has_difference(self) -> bool:
        """True if at least one entry belongs in the evidence tree."""
        return any(entry.is_evidence for entry in self.entries.values())

    def iter_evidence(self) -> Iterator[EvidenceEntry]:
        """Iterate over added and changed entries in path order."""
        for rel_path in sorted(self.entries):
            entry = self.entries[rel_path]
            if entry.is_evidence:
                yield entry

    def summary(self) -> str:
        return (
            f"{self.added_count} added, {self.changed_count} changed, "
            f"{self.unchanged_count} unchanged, {self.removed_count} removed"
        )


# =============================================================================
# Error Models
# =============================================================================

class EvidenceError(Exception):
    """Base class for errors raised by the evidence engine."""


class SourceIOError(EvidenceError):
    """Unexpected failure while reading, copying or deleting files."""

    def __init__(self, message: str, path: Optional[Path | str] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class SnapshotMissingError(EvidenceError):
    """A snapshot root required for comparison does not exist."""

    def __init__(self, path: Path | str):
        super().__init__(f"Snapshot not found: {path}")
        self.path = str(path)


class ConfigError(EvidenceError):
    """Configuration is missing, unreadable or incomplete."""


@dataclass
class OperationError:
    """Error information reported to the user for a failed operation."""
    path: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException, path: Path | str = "") -> 'OperationError':
        return cls(
            path=str(getattr(exc, 'path', None) or path),
            error_type=type(exc).__name__,
            message=str(exc),
        )

    def __str__(self) -> str:
        return f"{self.error_type}: {self.path} - {self.message}"


# =============================================================================
# Collaborator Interfaces
# =============================================================================

class ConfigSource(ABC):
    """Supplies monitoring targets and application settings."""

    @abstractmethod
    def get_app_settings(self) -> AppSettings:
        """Return settings; raise ConfigError if required fields are absent."""

    @abstractmethod
    def get_monitoring_targets(self) -> list[MonitoringTarget]:
        """Return configured targets in order; empty if none are configured."""


class NotificationSink(ABC):
    """Delivers messages to a human. Both methods are fire-and-forget."""

    @abstractmethod
    def notify_info(self, message: str) -> None:
        ...

    @abstractmethod
    def notify_error(self, message: str) -> None:
        ...

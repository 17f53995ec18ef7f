"""
Snapshot engine.

Provides functionality for:
- Resolving target path patterns (date placeholders, wildcards)
- Capturing snapshots of monitored files
- Comparing snapshots and extracting evidence
- Deleting snapshots after extraction
"""

from evidence_support.core.snapshot.resolver import (
    PatternResolver,
    substitute_date_tokens,
)
from evidence_support.core.snapshot.scanner import (
    SnapshotScanner,
    SnapshotIndex,
)
from evidence_support.core.snapshot.capturer import SnapshotCapturer
from evidence_support.core.snapshot.extractor import EvidenceExtractor
from evidence_support.core.snapshot.retention import RetentionManager

__all__ = [
    # Resolver
    'PatternResolver',
    'substitute_date_tokens',
    # Scanner
    'SnapshotScanner',
    'SnapshotIndex',
    # Capture
    'SnapshotCapturer',
    # Extraction
    'EvidenceExtractor',
    'RetentionManager',
]

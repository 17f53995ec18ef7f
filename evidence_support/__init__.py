"""
Evidence support tool.

Captures snapshots of monitored log files before and after an
observation window and collects what changed into an evidence folder.
"""

__version__ = "1.0.0"

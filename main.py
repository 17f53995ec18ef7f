"""
Main entry point for the Evidence Support tool.

This module handles:
- Command line argument parsing
- Logging configuration
- Interactive monitoring sessions
- One-off snapshot capture and evidence extraction
- Exception handling
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Optional, List

from evidence_support import __version__
from evidence_support.core.models import AppSettings, ConfigError, MonitoringTarget
from evidence_support.core.session import MonitoringSession
from evidence_support.core.snapshot.capturer import SnapshotCapturer
from evidence_support.core.snapshot.extractor import EvidenceExtractor
from evidence_support.services.hashing import HashAlgorithm
from evidence_support.services.notifications import LoggingNotificationSink
from evidence_support.services.settings import SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "EvidenceSupport"
APP_VERSION = __version__

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NO_DIFFERENCES = 2


# =============================================================================
# Enums
# =============================================================================

class StartupMode(Enum):
    """Application startup mode."""
    MONITOR = auto()
    SNAPSHOT = auto()
    DIFF = auto()
    INIT_CONFIG = auto()


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    mode: StartupMode = StartupMode.MONITOR
    config_file: Optional[str] = None
    snapshot_path: Optional[str] = None
    earlier_path: Optional[str] = None
    later_path: Optional[str] = None
    output_path: Optional[str] = None
    keep_snapshots: bool = False
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug: bool = False


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""
    
    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'
    
    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()
    
    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        
        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"
        
        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.
    
    Args:
        level: Log level string
        log_file: Optional file path for logging
        
    Returns:
        Root logger instance
    """
    # Get numeric level
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    
    # Create root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    
    # Remove existing handlers
    root_logger.handlers.clear()
    
    # Console handler (stdout is left to operator prompts)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)
    
    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)
    
    return root_logger


# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Collect new and changed log files over an observation window",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -c settings.json                      Monitor until Enter is pressed
  %(prog)s -c settings.json --snapshot snap1     Capture the configured targets once
  %(prog)s --diff snap1 snap2 -o evidence        Extract evidence from two snapshots
  %(prog)s -c settings.json --init-config        Write a template settings file
        """
    )

    # Mode selection
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        '--snapshot',
        metavar='ROOT',
        help='Capture the configured targets into ROOT and exit'
    )
    mode_group.add_argument(
        '--diff',
        nargs=2,
        metavar=('EARLIER', 'LATER'),
        help='Extract evidence from two snapshot folders'
    )
    mode_group.add_argument(
        '--init-config',
        action='store_true',
        help='Write a template settings file and exit'
    )

    # Diff options
    parser.add_argument(
        '-o', '--output',
        help='Evidence folder for --diff'
    )
    parser.add_argument(
        '-k', '--keep-snapshots',
        action='store_true',
        help='Keep the snapshot folders after --diff'
    )
    parser.add_argument(
        '--hash',
        choices=[a.name.lower() for a in HashAlgorithm],
        default='sha256',
        help='Hash algorithm used to compare file contents'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Settings file path'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode (also logs to a file)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        help='Write logs to this file'
    )

    # Version
    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    if parsed.diff and not parsed.output:
        parser.error('--diff requires -o/--output')

    result = CommandLineArgs()
    result.config_file = parsed.config
    result.output_path = parsed.output
    result.keep_snapshots = parsed.keep_snapshots
    result.hash_algorithm = HashAlgorithm.from_string(parsed.hash)
    result.log_file = parsed.log_file
    result.debug = parsed.debug

    # Determine mode
    if parsed.init_config:
        result.mode = StartupMode.INIT_CONFIG
    elif parsed.diff:
        result.mode = StartupMode.DIFF
        result.earlier_path, result.later_path = parsed.diff
    elif parsed.snapshot:
        result.mode = StartupMode.SNAPSHOT
        result.snapshot_path = parsed.snapshot
    else:
        result.mode = StartupMode.MONITOR

    # Log level
    if parsed.debug or parsed.verbose:
        result.log_level = 'DEBUG'
    else:
        result.log_level = parsed.log_level

    return result


# =============================================================================
# Modes
# =============================================================================

def run_monitor(
    args: CommandLineArgs,
    notifier: LoggingNotificationSink,
    stop_requested: Optional[threading.Event] = None
) -> int:
    """
    Run one monitoring session until Enter, SIGINT or SIGTERM.

    Enter is only watched when stdin is a terminal.
    """
    session = MonitoringSession(
        SettingsManager(args.config_file),
        notifier,
        extractor=EvidenceExtractor(notifier, hash_algorithm=args.hash_algorithm),
    )
    session.add_status_observer(lambda status: print(status, flush=True))

    if not session.start():
        return EXIT_FAILURE

    if stop_requested is None:
        stop_requested = threading.Event()
    _install_stop_handlers(stop_requested)

    if sys.stdin is not None and sys.stdin.isatty():
        waiter = threading.Thread(target=_wait_for_enter, args=(stop_requested,), daemon=True)
        waiter.start()
    else:
        print("Monitoring until SIGINT or SIGTERM...", flush=True)
    stop_requested.wait()

    session.stop()
    folder = session.session_folder
    if folder is not None:
        print(f"Session folder: {folder}", flush=True)
    return EXIT_OK


def _install_stop_handlers(stop_requested: threading.Event) -> None:
    """Route SIGINT and SIGTERM to the stop event."""
    def _signal_handler(signum, frame) -> None:
        logging.info(f"Received signal {signum}, stopping monitoring...")
        stop_requested.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def _wait_for_enter(stop_requested: threading.Event) -> None:
    print("Press Enter to stop monitoring...", flush=True)
    try:
        sys.stdin.readline()
    finally:
        stop_requested.set()


def run_snapshot(args: CommandLineArgs, notifier: LoggingNotificationSink) -> int:
    """Capture the configured targets once."""
    targets = SettingsManager(args.config_file).get_monitoring_targets()
    capturer = SnapshotCapturer(notifier)
    return EXIT_OK if capturer.create_snapshot(args.snapshot_path, targets) else EXIT_FAILURE


def run_diff(args: CommandLineArgs, notifier: LoggingNotificationSink) -> int:
    """Extract evidence from two existing snapshots."""
    extractor = EvidenceExtractor(notifier, hash_algorithm=args.hash_algorithm)
    has_difference = extractor.extract_evidence(
        args.earlier_path,
        args.later_path,
        args.output_path,
        keep_snapshots=args.keep_snapshots,
    )
    if not has_difference:
        notifier.notify_info("No differences were found.")
        return EXIT_NO_DIFFERENCES
    print(f"Evidence written to {args.output_path}", flush=True)
    return EXIT_OK


def run_init_config(args: CommandLineArgs, notifier: LoggingNotificationSink) -> int:
    """Write a template settings file."""
    manager = SettingsManager(args.config_file)
    if manager.settings_path.exists():
        notifier.notify_error(f"Settings file already exists: {manager.settings_path}")
        return EXIT_FAILURE

    template_settings = AppSettings(
        evidence_save_path=str(Path.home() / 'evidence'),
        keep_snapshot=False,
    )
    template_targets = [
        MonitoringTarget(name='AppLog', path_pattern='/var/log/app/{YYYY}{MM}{DD}/*.log'),
    ]
    if not manager.save(template_settings, template_targets):
        notifier.notify_error(f"Could not write {manager.settings_path}")
        return EXIT_FAILURE

    notifier.notify_info(f"Settings template written to {manager.settings_path}")
    return EXIT_OK


MODE_HANDLERS = {
    StartupMode.MONITOR: run_monitor,
    StartupMode.SNAPSHOT: run_snapshot,
    StartupMode.DIFF: run_diff,
    StartupMode.INIT_CONFIG: run_init_config,
}


# =============================================================================
# Main Function
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 for success)
    """
    args = parse_arguments(argv)

    log_file = Path(args.log_file) if args.log_file else None
    if log_file is None and args.debug:
        log_file = Path.cwd() / 'logs' / f"{APP_NAME}_{datetime.now():%Y%m%d}.log"
    logger = setup_logging(args.log_level, log_file)
    logger.info(f"Starting {APP_NAME} v{APP_VERSION} in {args.mode.name} mode")

    notifier = LoggingNotificationSink(stream=sys.stdout)

    try:
        return MODE_HANDLERS[args.mode](args, notifier)
    except ConfigError as e:
        notifier.notify_error(str(e))
        return EXIT_FAILURE
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

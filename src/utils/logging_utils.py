"""
Logging utilities for the netstat-stats command line.

Log records go to stderr so the report on stdout stays machine-readable.
Provides timing and record counts for each processing step.
"""

import logging
import time
import sys
from datetime import datetime
from typing import Optional, Any, TextIO


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record):
        color = self.COLORS.get(record.levelname, '') if self.use_color else ''
        reset = self.RESET if self.use_color else ''

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        level_str = f"{color}{record.levelname:8}{reset}"

        location = f"{record.module}.{record.funcName}" if record.funcName != '<module>' else record.module

        message = record.getMessage()

        extras = []
        for key in ['duration_ms', 'record_count', 'snapshot_count', 'line_number']:
            if hasattr(record, key):
                value = getattr(record, key)
                if key == 'duration_ms':
                    extras.append(f"duration={value:.1f}ms")
                elif key == 'record_count':
                    extras.append(f"records={value}")
                elif key == 'snapshot_count':
                    extras.append(f"snapshots={value}")
                elif key == 'line_number':
                    extras.append(f"line={value}")

        extra_str = f" [{', '.join(extras)}]" if extras else ""

        return f"{timestamp} | {level_str} | {location:30} | {message}{extra_str}"


def setup_logging(level: str = "WARNING", stream: Optional[TextIO] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Destination stream, stderr by default
    """
    stream = stream or sys.stderr
    numeric_level = getattr(logging, level.upper())

    # Remove existing handlers
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(use_color=stream.isatty()))
    handler.setLevel(numeric_level)

    root.setLevel(numeric_level)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger by name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class LogTimer:
    """
    Context manager for timing operations with automatic logging.

    Usage:
        with LogTimer(logger, "Parsing capture") as timer:
            records = parser.parse(data)
            timer.set_record_count(len(records))
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.INFO,
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None
        self.record_count = None
        self.extra_info = {}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.perf_counter() - self.start_time) * 1000

        extra = {'duration_ms': duration_ms}
        if self.record_count is not None:
            extra['record_count'] = self.record_count
        extra.update(self.extra_info)

        # Failures are reported once by the caller; only trace them here
        if exc_type is not None:
            self.logger.log(
                self.level,
                f"Failed: {self.operation} - {exc_type.__name__}",
                extra=extra
            )
        else:
            self.logger.log(
                self.level,
                f"Completed: {self.operation}",
                extra=extra
            )

        return False

    def set_record_count(self, count: int) -> None:
        """Set the number of records processed."""
        self.record_count = count

    def add_info(self, key: str, value: Any) -> None:
        """Add extra info to the completion log."""
        self.extra_info[key] = value

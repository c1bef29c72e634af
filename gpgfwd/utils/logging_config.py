"""Logging configuration for the GPG forwarding debug tool."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, List
from dataclasses import dataclass
import threading


@dataclass
class LogEntry:
    """Represents a single log entry."""
    timestamp: datetime
    level: str
    logger_name: str
    message: str

    def format(self) -> str:
        """Format the log entry as a string."""
        ts = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        return f"[{ts}] [{self.level:8}] {self.logger_name}: {self.message}"


class LogBuffer:
    """Thread-safe buffer of log entries, embedded in saved reports."""

    def __init__(self, max_entries: int = 10000):
        self._entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._lock = threading.Lock()

    def add(self, entry: LogEntry) -> None:
        """Add a log entry to the buffer."""
        with self._lock:
            self._entries.append(entry)
            if len(self._entries) > self._max_entries:
                self._entries = self._entries[-self._max_entries:]

    def get_entries(self) -> List[LogEntry]:
        """Snapshot of the buffered entries, oldest first."""
        with self._lock:
            return self._entries.copy()


# Global log buffer instance
_log_buffer: Optional[LogBuffer] = None


def get_log_buffer() -> LogBuffer:
    """Get the global log buffer instance."""
    global _log_buffer
    if _log_buffer is None:
        _log_buffer = LogBuffer()
    return _log_buffer


class BufferHandler(logging.Handler):
    """Logging handler that writes to the log buffer."""

    def __init__(self, buffer: LogBuffer):
        super().__init__()
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the buffer."""
        entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created),
            level=record.levelname,
            logger_name=record.name,
            message=self.format(record)
        )
        self.buffer.add(entry)


def setup_logging(level: int = logging.WARNING,
                  log_file: Optional[Path] = None) -> LogBuffer:
    """
    Set up logging for the application.

    Console records go to stderr so they never interleave with the
    diagnostic report printed on stdout.

    Args:
        level: Minimum log level for the console
        log_file: Optional file path to also write logs to

    Returns:
        The LogBuffer instance collecting every record
    """
    buffer = get_log_buffer()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s.%(msecs)03d [%(levelname)-8s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Buffer always captures DEBUG for saved reports
    buffer_handler = BufferHandler(buffer)
    buffer_handler.setLevel(logging.DEBUG)
    buffer_handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(buffer_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return buffer


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)

"""
Logging setup and in-memory capture of pipeline diagnostics.

The diff pipeline never raises on malformed input; it logs and degrades.
MemoryLogHandler keeps those log records so that a caller can show them
next to the diff result.
"""

import logging
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

PACKAGE_LOGGER = "prefab_yaml_diff"


@dataclass
class CapturedRecord:
    """A captured log record."""

    timestamp: datetime
    level: str
    logger_name: str
    message: str
    level_no: int

    def format(self, show_timestamp: bool = True) -> str:
        """Format the record for display."""
        parts = []
        if show_timestamp:
            parts.append(self.timestamp.strftime("%H:%M:%S"))
        parts.append(f"[{self.level}]")
        # Shorten logger name (keep last 2 parts)
        parts.append(".".join(self.logger_name.split(".")[-2:]))
        parts.append(self.message)
        return " ".join(parts)


class MemoryLogHandler(logging.Handler):
    """
    Logging handler that stores records in memory.

    Uses a bounded buffer to limit memory usage.
    """

    def __init__(self, max_records: int = 1000, level: int = logging.DEBUG):
        super().__init__(level)
        self._records: deque[CapturedRecord] = deque(maxlen=max_records)
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            captured = CapturedRecord(
                timestamp=datetime.fromtimestamp(record.created),
                level=record.levelname,
                logger_name=record.name,
                message=self.format(record),
                level_no=record.levelno,
            )
            self._records.append(captured)
        except Exception:
            self.handleError(record)

    def get_records(
        self,
        min_level: int = logging.DEBUG,
        logger_filter: Optional[str] = None,
    ) -> list[CapturedRecord]:
        """
        Get stored records with optional filtering.

        Args:
            min_level: Minimum log level to include
            logger_filter: If set, only include loggers containing this string

        Returns:
            List of matching CapturedRecord objects
        """
        return [
            record
            for record in self._records
            if record.level_no >= min_level
            and (not logger_filter or logger_filter in record.logger_name)
        ]

    def clear(self) -> None:
        """Clear all stored records."""
        self._records.clear()


@contextmanager
def capture_logs(min_level: int = logging.WARNING) -> Iterator[MemoryLogHandler]:
    """
    Capture the package's log records for the duration of a block.

    Example:
        with capture_logs() as captured:
            result = compare_texts(old_text, new_text)
        warnings = captured.get_records()
    """
    handler = MemoryLogHandler(level=min_level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = package_logger.level
    package_logger.addHandler(handler)
    if package_logger.getEffectiveLevel() > min_level:
        package_logger.setLevel(min_level)
    try:
        yield handler
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)


def setup_logging(level: int = logging.INFO) -> None:
    """
    Setup console logging for the command line tool.

    Args:
        level: Logging level for the root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, MemoryLogHandler)
        for h in root_logger.handlers
    )
    if not has_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        )
        root_logger.addHandler(console_handler)

"""
SharedLogger - Thread-safe append-only log sink shared by concurrent producers.

One SharedLogger is constructed at startup and handed to every producer.
It owns a single long-lived append handle; a single lock guards the
threshold check, the write and the flush, so lines from concurrent
producers never interleave and are never lost. File order is the order
in which producers acquired the lock.

Write failures are best-effort by default: they are reported through the
standard logging module and swallowed so a producer never crashes because
of its logger. Pass ``strict=True`` to have them raised as WriteError.
"""

import logging
import threading
from pathlib import Path
from typing import Iterator

from config import LoggerConfig, DEFAULT_LOG_FILE
from errors import ConfigError, ReadError, WriteError
from log_utils import Severity, format_line, line_has_severity

logger = logging.getLogger(__name__)


def _open_for_append(path: Path):
    """Open ``path`` for UTF-8 appending, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return open(path, "a", encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot open {path} for appending: {e}") from e


class SharedLogger:
    """Process-wide log sink that filters by minimum severity.

    Usage:
        shared = SharedLogger(Severity.WARNING, "logs/app.log")
        shared.log(Severity.ERROR, "disk full")
        errors = list(shared.read(Severity.ERROR))
    """

    def __init__(
        self,
        minimum_severity=Severity.INFO,
        destination_path=DEFAULT_LOG_FILE,
        strict: bool = False,
    ):
        self._lock = threading.Lock()
        self._minimum_severity = Severity.parse(minimum_severity)
        self._path = Path(destination_path)
        self._file = _open_for_append(self._path)
        self.strict = strict

    @classmethod
    def from_config(cls, config: LoggerConfig, strict: bool = False) -> "SharedLogger":
        return cls(config.minimum_severity, config.destination_path, strict=strict)

    @property
    def minimum_severity(self) -> Severity:
        with self._lock:
            return self._minimum_severity

    @property
    def destination_path(self) -> Path:
        with self._lock:
            return self._path

    def configure(self, minimum_severity, destination_path) -> None:
        """Atomically replace the threshold and destination.

        The new destination is opened before the lock is taken; if that
        fails ConfigError is raised and the current settings stay in place.
        """
        severity = Severity.parse(minimum_severity)
        path = Path(destination_path)
        new_file = _open_for_append(path)

        with self._lock:
            old_file = self._file
            self._minimum_severity = severity
            self._path = path
            self._file = new_file

        if old_file is not None:
            old_file.close()
        logger.info(f"Logger configured: level={severity}, file={path}")

    def configure_from_file(self, config_path) -> None:
        """Apply a key=value config file (keys logLevel, logFile)."""
        config = LoggerConfig.from_file(config_path)
        self.configure(config.minimum_severity, config.destination_path)

    def set_minimum_severity(self, minimum_severity) -> None:
        severity = Severity.parse(minimum_severity)
        with self._lock:
            self._minimum_severity = severity

    def log(self, severity, message: str) -> bool:
        """Append ``[SEVERITY] message`` if severity passes the threshold.

        The line is flushed before returning. Returns True when a line was
        written, False when it was filtered out or the write failed.
        An unknown severity name follows the write-failure policy: logged
        and dropped, or raised as ConfigError when strict.
        """
        try:
            severity = Severity.parse(severity)
        except ConfigError as e:
            if self.strict:
                raise
            logger.error(f"Dropped log line with bad severity: {e}")
            return False
        line = format_line(severity, message)

        with self._lock:
            if severity < self._minimum_severity:
                return False
            try:
                if self._file is None:
                    raise ValueError("logger is closed")
                self._file.write(line)
                self._file.flush()
                return True
            except (OSError, ValueError) as e:
                failure = WriteError(f"Failed to write to {self._path}: {e}")
                failure.__cause__ = e

        if self.strict:
            raise failure
        logger.error(f"Dropped log line: {failure}", exc_info=failure)
        return False

    def info(self, message: str) -> bool:
        return self.log(Severity.INFO, message)

    def warning(self, message: str) -> bool:
        return self.log(Severity.WARNING, message)

    def error(self, message: str) -> bool:
        return self.log(Severity.ERROR, message)

    def read(self, filter_severity) -> Iterator[str]:
        """Lazily yield destination lines tagged with ``filter_severity``.

        Every call scans from the start of the file. ReadError is raised
        immediately if the destination does not exist.
        """
        severity = Severity.parse(filter_severity)
        path = self.destination_path
        if not path.exists():
            raise ReadError(f"Log file not found: {path}")
        return self._scan(path, severity)

    @staticmethod
    def _scan(path: Path, severity: Severity) -> Iterator[str]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    if line_has_severity(line, severity):
                        yield line.rstrip("\n")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(f"Cannot read log file {path}: {e}") from e

    def close(self) -> None:
        """Close the destination handle. Idempotent."""
        with self._lock:
            file, self._file = self._file, None
        if file is not None:
            file.close()

    def __enter__(self) -> "SharedLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

"""
Logger configuration from key=value files and the environment.

Configuration files use one ``key=value`` pair per line:

    logLevel=WARNING
    logFile=logs/app.log

Recognized keys are ``logLevel`` (INFO|WARNING|ERROR) and ``logFile``.
Unrecognized keys are ignored; missing keys fall back to INFO / "app.log".
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from errors import ConfigError
from log_utils import Severity

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "app.log"

LEVEL_KEY = "logLevel"
FILE_KEY = "logFile"


def parse_settings(text: str) -> dict[str, str]:
    """Parse key=value lines into a dict.

    A line is kept only if it splits into exactly two parts on '=';
    blank lines and '#' comments are skipped. Later keys override earlier ones.
    """
    settings: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split("=")
        if len(parts) != 2:
            logger.debug(f"Skipping malformed config line: {raw!r}")
            continue
        settings[parts[0].strip()] = parts[1].strip()
    return settings


def load_settings(path) -> dict[str, str]:
    """Read and parse a key=value file. Raises ConfigError if unreadable."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    return parse_settings(text)


def save_settings(path, settings: dict[str, str]) -> None:
    """Write settings as key=value lines, in insertion order."""
    path = Path(path)
    content = "".join(f"{key}={value}\n" for key, value in settings.items())
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot write config file {path}: {e}") from e


@dataclass(frozen=True)
class LoggerConfig:
    """Settings for a SharedLogger: minimum severity and destination file."""

    minimum_severity: Severity = Severity.INFO
    destination_path: str = DEFAULT_LOG_FILE

    @classmethod
    def from_settings(cls, settings: dict[str, str]) -> "LoggerConfig":
        level = settings.get(LEVEL_KEY, DEFAULT_LOG_LEVEL)
        log_file = settings.get(FILE_KEY, DEFAULT_LOG_FILE)
        return cls(
            minimum_severity=Severity.parse(level),
            destination_path=log_file or DEFAULT_LOG_FILE,
        )

    @classmethod
    def from_file(cls, path) -> "LoggerConfig":
        return cls.from_settings(load_settings(path))

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """Build a config from the environment (and a .env file, if any).

        LOG_CONFIG points at a key=value file and wins when it exists;
        otherwise SHARED_LOG_LEVEL and SHARED_LOG_FILE are used directly.
        """
        load_dotenv()

        config_path = os.getenv("LOG_CONFIG")
        if config_path:
            if Path(config_path).exists():
                return cls.from_file(config_path)
            logger.warning(f"LOG_CONFIG={config_path} does not exist, using environment")

        return cls.from_settings({
            LEVEL_KEY: os.getenv("SHARED_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            FILE_KEY: os.getenv("SHARED_LOG_FILE", DEFAULT_LOG_FILE),
        })

    def to_settings(self) -> dict[str, str]:
        return {
            LEVEL_KEY: self.minimum_severity.name,
            FILE_KEY: str(self.destination_path),
        }

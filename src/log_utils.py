"""Severity levels, log records and the on-disk line format.

Every line in a destination file looks like ``[SEVERITY] message`` and is
newline-terminated. Messages are written verbatim: an embedded newline
splits the record across two lines and the second half will not be
recognized by the reader.
"""

from dataclasses import dataclass
from enum import IntEnum

from errors import ConfigError


class Severity(IntEnum):
    """Ordered log level used for filtering (INFO < WARNING < ERROR)."""

    INFO = 0
    WARNING = 1
    ERROR = 2

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value) -> "Severity":
        """Return the Severity for a name like ``"WARNING"``.

        Severity instances pass straight through. Names are case-sensitive,
        matching the tags written to the destination file.
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip()
        try:
            return cls[name]
        except KeyError:
            valid = "|".join(s.name for s in cls)
            raise ConfigError(f"Unknown severity '{value}' (expected {valid})") from None


def severity_tag(severity: Severity) -> str:
    return f"[{severity.name}]"


def format_line(severity: Severity, message: str) -> str:
    """Render a record as a single newline-terminated destination line."""
    return f"{severity_tag(severity)} {message}\n"


def line_has_severity(line: str, severity: Severity) -> bool:
    return line.startswith(severity_tag(severity))


@dataclass(frozen=True)
class LogRecord:
    """One log event: a severity and a message. Immutable once built."""

    severity: Severity
    message: str

    def format(self) -> str:
        return format_line(self.severity, self.message).rstrip("\n")

    @classmethod
    def parse(cls, line: str) -> "LogRecord | None":
        """Rebuild a record from a destination line, or None if it has no known tag."""
        line = line.rstrip("\n")
        for severity in Severity:
            tag = severity_tag(severity)
            if line.startswith(tag + " "):
                return cls(severity, line[len(tag) + 1:])
            if line == tag:
                return cls(severity, "")
        return None

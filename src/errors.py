"""Exception hierarchy for the shared logger."""


class LoggerError(Exception):
    """Base class for all shared logger failures."""


class ConfigError(LoggerError):
    """Destination unwritable, unknown severity name, or unreadable config file."""


class WriteError(LoggerError):
    """I/O failure while appending a line to the destination."""


class ReadError(LoggerError):
    """Destination missing or unreadable when scanning it back."""

"""
Config Watcher - Re-applies the logger's key=value config file when it changes.

When the config file is edited on disk this watcher:
1. Detects the change via watchdog events (modified, created or moved into place)
2. Reloads the file and calls SharedLogger.configure with the new settings
3. Keeps the previous settings if the new file is invalid

A polling loop runs alongside the observer to catch edits that produced
no event (network filesystems, some editors).
"""

import logging
import threading
from pathlib import Path

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from config import LoggerConfig, parse_settings
from errors import ConfigError

logger = logging.getLogger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog handler that triggers a reload when the config file changes."""

    def __init__(self, watcher: "ConfigWatcher"):
        super().__init__()
        self.watcher = watcher

    def _matches(self, path) -> bool:
        return Path(path).resolve() == self.watcher.config_path.resolve()

    def on_modified(self, event) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self.watcher.reload()

    def on_created(self, event) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self.watcher.reload()

    def on_moved(self, event) -> None:
        # Editors often save by writing a temp file and renaming it over the original
        if not event.is_directory and self._matches(event.dest_path):
            self.watcher.reload()


class ConfigWatcher:
    """Keeps a SharedLogger in sync with a key=value config file."""

    def __init__(self, shared_logger, config_path: str, check_interval: float = 5):
        self.shared_logger = shared_logger
        self.config_path = Path(config_path)
        self.check_interval = check_interval
        self.reload_count = 0
        self._last_content: str | None = None
        self._reload_lock = threading.Lock()
        self._observer = None
        self._running = False
        self._stop_event = threading.Event()

    def reload(self) -> bool:
        """Load the config file and apply it. Returns True if the logger changed.

        Unchanged content is skipped. Invalid or unreadable files are logged
        and the logger keeps its current settings.
        """
        with self._reload_lock:
            try:
                content = self.config_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Cannot read config file {self.config_path}: {e}")
                return False

            if content == self._last_content:
                return False

            try:
                config = LoggerConfig.from_settings(parse_settings(content))
                self.shared_logger.configure(
                    config.minimum_severity, config.destination_path
                )
            except ConfigError as e:
                logger.error(f"Ignoring invalid config {self.config_path.name}: {e}")
                return False

            self._last_content = content
            self.reload_count += 1
            logger.info(
                f"Reloaded {self.config_path.name} (reload #{self.reload_count})"
            )
            return True

    def _start_observer(self) -> None:
        """Start the watchdog observer on the config file's directory."""
        handler = ConfigFileHandler(self)
        self._observer = Observer()
        self._observer.schedule(handler, str(self.config_path.parent), recursive=False)
        self._observer.daemon = True
        self._observer.start()
        logger.info(f"Watchdog observer started on: {self.config_path.parent}")

    def run(self) -> None:
        """Main loop: watch for events and poll as a fallback until stopped."""
        logger.info(f"Starting ConfigWatcher for: {self.config_path}")
        self._running = True
        self._stop_event.clear()
        self._start_observer()

        while self._running:
            try:
                if self.config_path.exists():
                    self.reload()
            except Exception as e:
                logger.error(f"Error during config check: {e}")
            if self._stop_event.wait(timeout=self.check_interval):
                break

    def stop(self) -> None:
        """Signal the watcher to stop. Safe to call more than once."""
        self._running = False
        self._stop_event.set()
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        logger.info("Stopping ConfigWatcher")

from .config_watcher import ConfigWatcher, ConfigFileHandler

__all__ = ["ConfigWatcher", "ConfigFileHandler"]

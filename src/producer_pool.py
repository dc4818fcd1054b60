"""
Producer Pool - Fixed-size worker pool that logs through one SharedLogger.

The entry point wires the pieces together the way an application would:
1. Loads logger settings from the environment / .env / LOG_CONFIG file
2. Constructs a single SharedLogger before any worker starts
3. Logs from several worker threads concurrently
4. Reads the ERROR lines back and prints them
"""

import os
import sys
import logging
import argparse
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterable

from dotenv import load_dotenv

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from config import LoggerConfig
from errors import LoggerError
from log_utils import LogRecord, Severity
from shared_logger import SharedLogger
from watchers.config_watcher import ConfigWatcher

load_dotenv()

DIAGNOSTIC_LOG_LEVEL = os.getenv("DIAGNOSTIC_LOG_LEVEL", "INFO")

try:
    WORKERS = max(1, int(os.getenv("PRODUCER_WORKERS", "3")))
except ValueError:
    WORKERS = 3

# Validate DIAGNOSTIC_LOG_LEVEL
if not hasattr(logging, DIAGNOSTIC_LOG_LEVEL):
    DIAGNOSTIC_LOG_LEVEL = "INFO"

logger = logging.getLogger("ProducerPool")

DEMO_RECORDS = [
    LogRecord(Severity.INFO, "Info message from Thread 1"),
    LogRecord(Severity.WARNING, "Warning from Thread 2"),
    LogRecord(Severity.ERROR, "Error from Thread 3"),
]


def setup_logging(level: str = DIAGNOSTIC_LOG_LEVEL) -> None:
    """Configure console logging for the program's own diagnostics."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )


class ProducerPool:
    """Runs log calls on a fixed number of worker threads sharing one logger."""

    def __init__(self, shared_logger: SharedLogger, workers: int = WORKERS):
        self.shared_logger = shared_logger
        self.workers = workers
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="producer"
        )

    def submit(self, severity, message: str) -> Future:
        """Queue one log call. The future resolves to True if a line was written."""
        return self._executor.submit(self.shared_logger.log, severity, message)

    def log_many(self, records: Iterable[LogRecord]) -> int:
        """Log every record from the pool and wait. Returns lines written."""
        futures = [self.submit(r.severity, r.message) for r in records]
        return sum(1 for f in futures if f.result())

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ProducerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


def produce_while_watching(
    pool: ProducerPool,
    watcher: ConfigWatcher,
    interval: float = 1.0,
    rounds: int | None = None,
) -> int:
    """Log DEMO_RECORDS every ``interval`` seconds while ``watcher`` reloads config.

    Runs ``rounds`` times, or until interrupted when rounds is None.
    Returns the number of lines written.
    """
    thread = threading.Thread(target=watcher.run, daemon=True, name="ConfigWatcher")
    thread.start()
    written = 0
    done = 0
    try:
        while rounds is None or done < rounds:
            written += pool.log_many(DEMO_RECORDS)
            done += 1
            time.sleep(interval)
    finally:
        watcher.stop()
        thread.join(timeout=5)
    return written


def main(argv=None) -> int:
    """Entry point: log from a worker pool, then print the ERROR lines."""
    parser = argparse.ArgumentParser(
        description="Log from a pool of worker threads through one shared logger."
    )
    parser.add_argument(
        "--config", help="key=value config file (keys logLevel, logFile)"
    )
    parser.add_argument(
        "--workers", type=int, default=WORKERS, help="number of producer threads"
    )
    parser.add_argument(
        "--show", default="ERROR", help="severity to read back (INFO|WARNING|ERROR)"
    )
    parser.add_argument(
        "--watch", action="store_true",
        help="keep producing and reload --config when it changes",
    )
    parser.add_argument(
        "--interval", type=float, default=1.0,
        help="seconds between production rounds with --watch",
    )
    parser.add_argument(
        "--rounds", type=int, default=None,
        help="stop after this many rounds with --watch (default: until Ctrl+C)",
    )
    args = parser.parse_args(argv)

    setup_logging()

    try:
        if args.config:
            config = LoggerConfig.from_file(args.config)
        else:
            config = LoggerConfig.from_env()
        show = Severity.parse(args.show)
        shared = SharedLogger.from_config(config)
    except LoggerError as e:
        logger.error(f"Startup failed: {e}")
        return 1

    logger.info(
        f"Logging to {config.destination_path} at {config.minimum_severity} "
        f"with {args.workers} workers"
    )

    with shared, ProducerPool(shared, workers=max(1, args.workers)) as pool:
        if args.watch and args.config:
            watcher = ConfigWatcher(shared, args.config)
            logger.info(f"Producing every {args.interval}s; edit {args.config} to reconfigure")
            try:
                written = produce_while_watching(
                    pool, watcher, interval=args.interval, rounds=args.rounds
                )
            except KeyboardInterrupt:
                logger.info("Shutdown requested (Ctrl+C)")
                written = None
        else:
            written = pool.log_many(DEMO_RECORDS)
        if written is not None:
            logger.info(f"{written} records written")

        print(f"\n=== {show} Logs ===")
        try:
            for line in shared.read(show):
                print(line)
        except LoggerError as e:
            logger.error(f"Cannot read back logs: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

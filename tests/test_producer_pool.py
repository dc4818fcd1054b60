"""Tests for the ProducerPool and the demo entry point."""

import pytest

from log_utils import LogRecord, Severity
from producer_pool import DEMO_RECORDS, ProducerPool, main, produce_while_watching
from shared_logger import SharedLogger
from watchers.config_watcher import ConfigWatcher


@pytest.fixture
def shared(tmp_path):
    logger = SharedLogger(Severity.INFO, tmp_path / "app.log")
    yield logger
    logger.close()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for var in ("LOG_CONFIG", "SHARED_LOG_LEVEL", "SHARED_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestProducerPool:
    """Test logging from a fixed worker pool."""

    def test_submit_returns_write_result(self, shared):
        with ProducerPool(shared, workers=2) as pool:
            assert pool.submit(Severity.ERROR, "boom").result() is True

    def test_log_many_counts_written_lines(self, shared):
        shared.set_minimum_severity(Severity.WARNING)
        with ProducerPool(shared, workers=3) as pool:
            assert pool.log_many(DEMO_RECORDS) == 2

    def test_every_record_lands_once(self, shared):
        records = [LogRecord(Severity.INFO, f"msg {i}") for i in range(300)]
        with ProducerPool(shared, workers=3) as pool:
            assert pool.log_many(records) == 300

        lines = list(shared.read(Severity.INFO))
        assert sorted(lines) == sorted(r.format() for r in records)

    def test_shutdown(self, shared):
        pool = ProducerPool(shared, workers=1)
        pool.shutdown()
        with pytest.raises(RuntimeError):
            pool.submit(Severity.INFO, "too late")


class TestMain:
    """Test the command-line entry point."""

    def test_prints_error_lines(self, clean_env, tmp_path, capsys):
        clean_env.setenv("SHARED_LOG_FILE", str(tmp_path / "demo.log"))

        assert main([]) == 0

        out = capsys.readouterr().out
        assert "=== ERROR Logs ===" in out
        assert "[ERROR] Error from Thread 3" in out
        assert "[INFO]" not in out
        assert len((tmp_path / "demo.log").read_text(encoding="utf-8").splitlines()) == 3

    def test_config_file_threshold(self, tmp_path, capsys):
        log_file = tmp_path / "cfg.log"
        config = tmp_path / "logger.properties"
        config.write_text(f"logLevel=ERROR\nlogFile={log_file}\n", encoding="utf-8")

        assert main(["--config", str(config), "--show", "WARNING"]) == 0

        assert "[WARNING]" not in capsys.readouterr().out
        assert log_file.read_text(encoding="utf-8") == "[ERROR] Error from Thread 3\n"

    def test_bad_config_fails(self, tmp_path):
        config = tmp_path / "logger.properties"
        config.write_text("logLevel=NOISY\n", encoding="utf-8")
        assert main(["--config", str(config)]) == 1

    def test_bad_show_severity_fails(self, clean_env, tmp_path):
        clean_env.setenv("SHARED_LOG_FILE", str(tmp_path / "demo.log"))
        assert main(["--show", "TRACE"]) == 1

    def test_watch_mode_runs_rounds(self, tmp_path, capsys):
        log_file = tmp_path / "watched.log"
        config = tmp_path / "logger.properties"
        config.write_text(f"logLevel=WARNING\nlogFile={log_file}\n", encoding="utf-8")

        argv = ["--config", str(config), "--watch", "--rounds", "2", "--interval", "0.05"]
        assert main(argv) == 0

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines.count("[ERROR] Error from Thread 3") == 2
        assert "[ERROR] Error from Thread 3" in capsys.readouterr().out


class TestProduceWhileWatching:
    """Test producing while the config file is hot-reloaded."""

    def test_reload_affects_live_producers(self, shared, tmp_path):
        watched = tmp_path / "watched.log"
        config = tmp_path / "logger.properties"
        config.write_text(f"logLevel=ERROR\nlogFile={watched}\n", encoding="utf-8")
        watcher = ConfigWatcher(shared, str(config), check_interval=0.05)

        with ProducerPool(shared, workers=3) as pool:
            written = produce_while_watching(pool, watcher, interval=0.1, rounds=5)

        assert shared.minimum_severity is Severity.ERROR
        lines = watched.read_text(encoding="utf-8").splitlines()
        assert lines
        assert all(line == "[ERROR] Error from Thread 3" for line in lines)
        assert written < 5 * len(DEMO_RECORDS)

    def test_stops_watcher_after_rounds(self, shared, tmp_path):
        config = tmp_path / "logger.properties"
        config.write_text(f"logFile={tmp_path / 'x.log'}\n", encoding="utf-8")
        watcher = ConfigWatcher(shared, str(config), check_interval=0.05)

        with ProducerPool(shared, workers=2) as pool:
            assert produce_while_watching(pool, watcher, interval=0, rounds=2) == 6

        assert watcher._stop_event.is_set()

import logging
from logging.handlers import RotatingFileHandler

from utils import logs_config
from utils.logs_config import setup_logger


def test_test_run_logs_to_console_only():
    assert logs_config.LOG_FILE is None
    assert not any(isinstance(h, RotatingFileHandler) for h in logs_config.logger.handlers)


def test_setup_logger_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    log = setup_logger(name="bookstore.test.console", log_file=None)

    assert [type(h) for h in log.handlers] == [logging.StreamHandler]
    assert list(tmp_path.iterdir()) == []


def test_setup_logger_with_file(tmp_path):
    log_file = tmp_path / "logs" / "bookstore.log"
    log = setup_logger(name="bookstore.test.file", log_file=str(log_file))
    log.info("✅ written")

    for handler in log.handlers:
        handler.flush()
    assert "✅ written" in log_file.read_text(encoding="utf-8")


def test_setup_logger_does_not_duplicate_handlers():
    first = setup_logger(name="bookstore.test.once", log_file=None)
    second = setup_logger(name="bookstore.test.once", log_file=None)

    assert first is second
    assert len(second.handlers) == 1

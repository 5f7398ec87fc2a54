import logging
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from runtime.logging_config import LOGGER_NAME, reset_logging, setup_logging


def test_quiet_without_file_has_no_handlers():
    logger = setup_logging(None, quiet=True)
    try:
        assert logger.name == LOGGER_NAME
        assert logger.handlers == []
        assert logger.propagate
        assert logger.level == logging.INFO
    finally:
        reset_logging()


def test_file_logging_and_debug_level(tmp_path):
    log_path = tmp_path / "run.log"
    logger = setup_logging(str(log_path), quiet=True, debug=True)
    try:
        assert logger.level == logging.DEBUG
        logger.debug("hello from the cloth")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from the cloth" in log_path.read_text()
    finally:
        reset_logging()


def test_repeated_setup_replaces_handlers(tmp_path):
    setup_logging(None)
    logger = setup_logging(str(tmp_path / "a.log"), debug=True)
    try:
        kinds = sorted(type(h).__name__ for h in logger.handlers)
        assert kinds == ["FileHandler", "StreamHandler"]
        assert all(h.level == logging.DEBUG for h in logger.handlers)
    finally:
        reset_logging()
    assert logging.getLogger(LOGGER_NAME).handlers == []


def test_unwritable_log_file_is_reported(tmp_path, capsys):
    missing = tmp_path / "no_such_dir" / "run.log"
    logger = setup_logging(str(missing), quiet=True)
    try:
        assert logger.handlers == []
        assert "Could not open log file" in capsys.readouterr().out
    finally:
        reset_logging()

"""Tests for logging setup and timed operations."""

import logging

import pytest

from appdata_backup.utils.logging import LOGGER_NAME, TimedOperation, get_logger, setup_logging


class TestTimedOperation:
    """Test duration logging around a block."""

    def test_success(self, caplog):
        logger = get_logger("tests")
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            with TimedOperation(logger, "backup of chrome", "DEBUG") as timed:
                pass

        assert timed.elapsed is not None and timed.elapsed >= 0
        messages = [record.getMessage() for record in caplog.records]
        assert messages[0] == "backup of chrome: started"
        assert messages[1].startswith("backup of chrome: done in ")

    def test_failure_is_logged_and_raised(self, caplog):
        logger = get_logger("tests")
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            with pytest.raises(PermissionError):
                with TimedOperation(logger, "restore of outlook"):
                    raise PermissionError("Access is denied")

        failure = caplog.records[-1]
        assert failure.levelno == logging.ERROR
        assert "PermissionError" in failure.getMessage()
        assert "Access is denied" in failure.getMessage()


def test_setup_logging_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"

    logger = setup_logging("WARNING", log_file)
    get_logger("tests").debug("detail for the file")
    for handler in logger.handlers:
        handler.flush()

    assert "detail for the file" in log_file.read_text(encoding="utf-8")
    setup_logging()

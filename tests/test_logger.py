"""
Tests for logging setup.
"""

import logging

import pytest

from utils import SchedulerLogger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_only(restore_root_logger):
    root = SchedulerLogger.setup_logging("debug")
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING


def test_file_handler(restore_root_logger, tmp_path):
    log_file = tmp_path / "scheduler.log"
    SchedulerLogger.setup_logging("INFO", str(log_file))
    logging.getLogger("services.test").info("slot search finished")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "services.test - INFO - slot search finished" in log_file.read_text()


def test_repeated_setup_does_not_stack_handlers(restore_root_logger):
    SchedulerLogger.setup_logging()
    root = SchedulerLogger.setup_logging()
    assert len(root.handlers) == 1

"""Tests for the application logger utility."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the logger singleton and logging state between tests."""
    import flow_cli.utils.logger as logger_mod

    original = logger_mod._logger
    original_handlers = list(logging.getLogger("flow_cli").handlers)
    logger_mod._logger = None

    existing = logging.getLogger("flow_cli")
    existing.handlers.clear()

    yield

    logger_mod._logger = None
    logging.getLogger("flow_cli").handlers.clear()
    logging.getLogger("flow_cli").handlers.extend(original_handlers)
    logger_mod._logger = original


def test_get_logger_creates_log_file(tmp_path):
    """Logger creates the log file inside user_log_dir."""
    with patch("flow_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from flow_cli.utils.logger import get_logger

        logger = get_logger()

    log_file = tmp_path / "flow.log"
    assert log_file.exists(), "Log file should be created on first use"
    assert isinstance(logger, logging.Logger)


def test_get_logger_returns_singleton(tmp_path):
    """Repeated calls return the same logger instance."""
    with patch("flow_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from flow_cli.utils.logger import get_logger

        l1 = get_logger()
        l2 = get_logger()

    assert l1 is l2


def test_child_logger_shares_handler(tmp_path):
    """Named loggers are children of the application logger."""
    with patch("flow_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from flow_cli.utils.logger import get_logger

        child = get_logger("sync")
        child.info("tick from child")

    assert child.name == "flow_cli.sync"
    for handler in logging.getLogger("flow_cli").handlers:
        handler.flush()
    assert "tick from child" in (tmp_path / "flow.log").read_text()


def test_logger_does_not_propagate(tmp_path):
    """Nothing reaches the root logger (the terminal belongs to the UI)."""
    with patch("flow_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from flow_cli.utils.logger import get_logger

        assert get_logger().propagate is False


def test_get_logger_creates_parent_dirs(tmp_path):
    """Logger creates nested directories if they do not exist."""
    nested = tmp_path / "a" / "b" / "c"
    with patch("flow_cli.utils.logger.user_log_dir", return_value=str(nested)):
        from flow_cli.utils.logger import get_logger

        get_logger()

    assert nested.is_dir()

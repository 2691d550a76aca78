#!/usr/bin/env python3
"""Tests for structured logging helpers."""

import logging
from unittest.mock import MagicMock

import pytest

from cpi_virtualbox.logging import configure_logging, get_logger, log_operation


class TestLogOperation:
    def test_success_logs_completed(self):
        logger = MagicMock()
        bound = logger.bind.return_value

        with log_operation(logger, "create_worker", worker_name="vm1") as log:
            assert log is bound

        logger.bind.assert_called_once_with(operation="create_worker", worker_name="vm1")
        bound.debug.assert_called_once_with("create_worker.started")
        event, = bound.info.call_args[0]
        assert event == "create_worker.completed"
        assert "duration_ms" in bound.info.call_args[1]

    def test_failure_logged_and_reraised(self):
        logger = MagicMock()
        bound = logger.bind.return_value

        with pytest.raises(RuntimeError, match="boom"):
            with log_operation(logger, "start_worker"):
                raise RuntimeError("boom")

        kwargs = bound.error.call_args[1]
        assert bound.error.call_args[0] == ("start_worker.failed",)
        assert kwargs["error"] == "boom"
        assert kwargs["error_type"] == "RuntimeError"


class TestConfigureLogging:
    def test_sets_level_and_file_handler(self, tmp_path):
        log_file = tmp_path / "provider.log"
        configure_logging(level="DEBUG", json_output=True, log_file=log_file)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)

        get_logger("cpi_virtualbox.test").info("test.event", answer=42)
        for handler in root.handlers:
            handler.flush()
        assert "test.event" in log_file.read_text()

        configure_logging(console_output=False)

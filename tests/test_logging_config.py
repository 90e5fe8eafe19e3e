"""Tests for logging configuration."""

import io
import json
import logging
import sys
from pathlib import Path

import pytest

from git_session.logging_config import (
    SafeStreamHandler,
    StructuredLogFormatter,
    configure_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _reraise(record):
    raise


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("git_session.facade", logging.WARNING, __file__, 1, "push failed", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredLogFormatter:
    def test_contextual_fields(self):
        payload = json.loads(
            StructuredLogFormatter().format(_record(operation="push", repository=Path("/tmp/repo")))
        )

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "git_session.facade"
        assert payload["message"] == "push failed"
        assert payload["operation"] == "push"
        assert payload["repository"] == "/tmp/repo"
        assert "duration_ms" not in payload

    def test_exception_is_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        payload = json.loads(StructuredLogFormatter().format(record))
        assert "RuntimeError: boom" in payload["exception"]


class TestSafeStreamHandler:
    def test_closed_stream_is_ignored(self):
        stream = io.StringIO()
        handler = SafeStreamHandler(stream)
        handler.handleError = _reraise
        stream.close()

        handler.emit(_record())

    def test_bad_file_descriptor_is_ignored(self):
        class DetachedStream:
            def write(self, text):
                raise OSError(9, "Bad file descriptor")

            def flush(self):
                pass

        handler = SafeStreamHandler(DetachedStream())
        handler.handleError = _reraise

        handler.emit(_record())

    def test_other_errors_propagate(self):
        class BrokenStream:
            def write(self, text):
                raise ValueError("unexpected")

            def flush(self):
                pass

        handler = SafeStreamHandler(BrokenStream())
        handler.handleError = _reraise

        with pytest.raises(ValueError, match="unexpected"):
            handler.emit(_record())


class TestConfigureLogging:
    def test_single_stderr_handler(self, restore_root_logger):
        configure_logging("debug")
        configure_logging("info")

        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0], SafeStreamHandler)
        assert restore_root_logger.level == logging.INFO
        assert logging.getLogger("git").level == logging.WARNING

    def test_json_output(self, restore_root_logger):
        configure_logging("INFO", json_output=True)

        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredLogFormatter)

    def test_log_file(self, restore_root_logger, temp_dir: Path):
        log_file = temp_dir / "nested" / "git-session.log"

        configure_logging("WARNING", log_file=log_file)
        logging.getLogger("git_session.test").debug("written to file only")

        assert restore_root_logger.level == logging.DEBUG
        assert restore_root_logger.handlers[0].level == logging.WARNING
        assert "written to file only" in log_file.read_text()

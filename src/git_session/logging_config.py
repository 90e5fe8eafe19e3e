import json
import logging
import sys
from pathlib import Path
from typing import Optional

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_CLOSED_STREAM_ERRORS = ("closed file", "bad file descriptor")


def _is_closed_stream_error(error: Exception) -> bool:
    text = str(error).lower()
    return any(marker in text for marker in _CLOSED_STREAM_ERRORS)


class SafeStreamHandler(logging.StreamHandler):
    """
    Stream handler that drops records once the host process has closed its stream.
    """

    def emit(self, record):
        if getattr(self.stream, "closed", False):
            return
        try:
            super().emit(record)
        except (ValueError, OSError) as e:
            if not _is_closed_stream_error(e):
                raise


class StructuredLogFormatter(logging.Formatter):
    """
    Formats log records as structured JSON with contextual fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in ("operation", "repository", "duration_ms"):
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_record["exception"] = record.exc_text
        return json.dumps(log_record, ensure_ascii=False, default=str)


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """
    Centralized logging configuration for git-session front ends.
    Sets up the root logger on stderr, optionally as JSON and optionally
    mirrored to a DEBUG-level log file.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = SafeStreamHandler(sys.stderr)
    handler.setFormatter(
        StructuredLogFormatter() if json_output else logging.Formatter(PLAIN_FORMAT)
    )
    handler.setLevel(log_level.upper())
    root_logger.addHandler(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(log_level.upper())

    # GitPython logs every command it runs at DEBUG
    logging.getLogger("git").setLevel("WARNING")

"""
Structured JSON logging for recordnorm

Every pipeline module logs through get_logger(__name__). Lines emitted while
a log_operation block is open carry the name of that pipeline stage, so a
"Batch validation complete" line can be traced to the stage that produced it.
"""
import logging
import os
import sys
import time
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

DEFAULT_LOGGER_NAME = "recordnorm"
JSON_FIELDS = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(stage)s] %(message)s"

_current_stage: ContextVar[str | None] = ContextVar("recordnorm_stage", default=None)


def current_stage() -> str | None:
    """Name of the innermost open log_operation, if any."""
    return _current_stage.get()


def resolve_level(value: str | None) -> int:
    """
    Turn a level name into a logging level, falling back to INFO.

    Examples:
        >>> resolve_level("warning") == logging.WARNING
        True
        >>> resolve_level("chatty") == logging.INFO
        True
    """
    level = logging.getLevelName((value or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


class StageFilter(logging.Filter):
    """Attaches the current pipeline stage to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "stage"):
            record.stage = current_stage() or "-"
        return True


class CustomJsonFormatter(JsonFormatter):
    """
    JSON formatter adding timestamp, upper-case level, logger, module,
    function and pipeline stage
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName

        stage = getattr(record, "stage", "-")
        if stage == "-":
            log_record.pop("stage", None)
        else:
            log_record["stage"] = stage


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Setup and configure a logger

    Args:
        name: Logger name
        level: Log level name, defaults to $LOG_LEVEL then INFO
        format_type: "json" or "text", defaults to $LOG_FORMAT then json

    Returns:
        Configured logger instance
    """
    log_level = resolve_level(level or os.getenv("LOG_LEVEL"))
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(StageFilter())

    if format_type == "json":
        handler.setFormatter(CustomJsonFormatter(fmt=JSON_FIELDS, datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Get a logger, configuring it from the environment on first use."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger


class log_operation:
    """
    Context manager timing one pipeline stage

    Usage:
        with log_operation("clean_text", logger, records=12):
            cleaned = text_cleaner.clean(records)

    Lines logged inside the block carry ``stage="clean_text"``. Exceptions
    are logged and re-raised.
    """

    def __init__(self, stage: str, logger: logging.Logger | None = None, **extra_fields):
        self.stage = stage
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time: float | None = None
        self.duration: float | None = None
        self._token = None

    def __enter__(self):
        self._token = _current_stage.set(self.stage)
        self.start_time = time.perf_counter()
        self.logger.debug("Stage started", extra=self.extra_fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        fields = {"duration_seconds": round(self.duration, 3), **self.extra_fields}

        try:
            if exc_type is None:
                self.logger.info("Stage finished", extra=fields)
            else:
                self.logger.error(
                    "Stage failed",
                    extra={**fields, "error_type": exc_type.__name__, "error_message": str(exc_val)},
                    exc_info=(exc_type, exc_val, exc_tb),
                )
        finally:
            _current_stage.reset(self._token)
        return False

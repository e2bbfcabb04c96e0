#!/usr/bin/env python3
from __future__ import annotations
import functools
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER_NAME = "audio_sentence_detector"


class SentenceDetectionError(Exception):
    """Base exception for sentence detection errors."""
    def __init__(self, message: str, stage: str = "unknown", cause: Optional[Exception] = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.timestamp = datetime.now()

    def context(self) -> Dict[str, Any]:
        """Fields describing the error, merged into the log record."""
        return {"stage": self.stage, "error_timestamp": self.timestamp.isoformat()}


class InvalidConfigurationError(SentenceDetectionError):
    """Raised when a detector configuration can never run."""
    def __init__(self, message: str, field: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message, stage="configuration", cause=cause)
        self.field = field

    def context(self) -> Dict[str, Any]:
        ctx = super().context()
        if self.field:
            ctx["config_field"] = self.field
        return ctx


class AudioDecodeError(SentenceDetectionError):
    """Raised when an audio file or payload cannot be turned into PCM."""
    def __init__(self, message: str, audio_path: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message, stage="decoding", cause=cause)
        self.audio_path = audio_path

    def context(self) -> Dict[str, Any]:
        ctx = super().context()
        if self.audio_path:
            ctx["audio_path"] = self.audio_path
        return ctx


class OutputError(SentenceDetectionError):
    """Raised when sentence output cannot be written."""
    def __init__(self, message: str, output_path: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message, stage="output", cause=cause)
        self.output_path = output_path

    def context(self) -> Dict[str, Any]:
        ctx = super().context()
        if self.output_path:
            ctx["output_path"] = self.output_path
        return ctx


# LogRecord attributes; anything else on a record came in through `extra=`
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_RECORD_ATTRS}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, `extra` fields included as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(record_extras(record))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """ANSI-colored console lines; debug traces are dimmed."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    TRACE_COLOR = '\033[2m'
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, "trace_event", None):
            color = self.TRACE_COLOR
        else:
            color = self.LEVEL_COLORS.get(record.levelno, "")
        return f"{color}{super().format(record)}{self.RESET}"


def _console_handler(structured: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(ColoredFormatter(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S',
        ))
    return handler


def _file_handler(log_file: str, structured: bool) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    structured_output: bool = False
) -> logging.Logger:
    """
    (Re)configure the package logger.

    Parameters
    ----------
    log_level : str
        DEBUG, INFO, WARNING, ERROR or CRITICAL
    log_file : Optional[str]
        Also log to this file (parent directories are created)
    console_output : bool
        Log to stderr
    structured_output : bool
        Emit JSON lines instead of human-readable text

    Returns
    -------
    logging.Logger
        The ``audio_sentence_detector`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console_output:
        logger.addHandler(_console_handler(structured_output))
    if log_file:
        logger.addHandler(_file_handler(log_file, structured_output))

    return logger


def log_exception(
    logger: logging.Logger,
    exception: Exception,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Log an exception at ERROR with its traceback and structured context."""
    extra: Dict[str, Any] = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
    }
    if isinstance(exception, SentenceDetectionError):
        extra.update(exception.context())
    if context:
        extra.update(context)

    logger.error(
        f"{extra.get('stage', 'unknown')} failed: {exception}",
        exc_info=(type(exception), exception, exception.__traceback__),
        extra=extra,
    )


def handle_error(
    logger: logging.Logger,
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
) -> None:
    """Log ``error`` and re-raise it unless ``reraise`` is False."""
    log_exception(logger, error, context)
    if reraise:
        raise error


_global_logger: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    """
    The package logger, set up at WARNING on first use.

    Until `configure_global_logging` runs, the stderr handler is capped at
    WARNING so debug traces only reach handlers the caller installed on the
    root logger.
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = setup_logging(log_level="WARNING")
        for handler in _global_logger.handlers:
            handler.setLevel(logging.WARNING)
    return _global_logger


class ErrorContext:
    """Log any exception leaving the block; re-raise it unless told otherwise."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        context: Optional[Dict[str, Any]] = None,
        reraise: bool = True
    ):
        self.logger = logger or get_logger()
        self.context = context or {}
        self.reraise = reraise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or not issubclass(exc_type, Exception):
            return False
        handle_error(self.logger, exc_val, self.context, self.reraise)
        return True


def error_context(
    logger: Optional[logging.Logger] = None,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
):
    """Decorator form of ``ErrorContext`` for decoding and writer entry points."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with ErrorContext(logger, context, reraise):
                return func(*args, **kwargs)
        return wrapper
    return decorator


class OutputContext:
    """Level-gated status lines for the CLI run."""

    def __init__(self, log_level: str = "WARNING"):
        self.log_level = log_level.upper()
        self.threshold = getattr(logging, self.log_level)
        self.logger = get_logger()

    def enabled(self, level: int) -> bool:
        return level >= self.threshold

    def log_status(self, message: str, level: str = "INFO") -> None:
        levelno = getattr(logging, level.upper())
        if self.enabled(levelno):
            self.logger.log(levelno, f"[*] {message}")

    def log_progress(self, message: str, details: Optional[str] = None) -> None:
        if self.enabled(logging.INFO):
            self.logger.info(f"[i] {message}")
        if details and self.enabled(logging.DEBUG):
            self.logger.debug(f"    {details}")

    def log_debug(self, message: str) -> None:
        if self.enabled(logging.DEBUG):
            self.logger.debug(f"    {message}")

    def log_intermediate_save(self, path: str, description: str) -> None:
        if self.enabled(logging.INFO):
            self.logger.info(f"[+] {description}: {path}")

    def log_completion(self, message: str, stats: Optional[Dict[str, Any]] = None) -> None:
        if self.enabled(logging.INFO):
            self.logger.info(f"[✓] {message}")
        if stats and self.enabled(logging.DEBUG):
            self.logger.debug("    " + ", ".join(f"{k}={v}" for k, v in stats.items()))


_global_output_context: Optional[OutputContext] = None


def get_output_context() -> OutputContext:
    global _global_output_context
    if _global_output_context is None:
        _global_output_context = OutputContext()
    return _global_output_context


def configure_global_logging(
    log_level: str = "WARNING",
    log_file: Optional[str] = None,
    console_output: bool = True,
    structured_output: bool = False
) -> None:
    """Configure the package logger and the status-line context together."""
    global _global_logger, _global_output_context
    _global_logger = setup_logging(log_level, log_file, console_output, structured_output)
    _global_output_context = OutputContext(log_level)


def log_status(message: str, level: str = "INFO") -> None:
    get_output_context().log_status(message, level)


def log_progress(message: str, details: Optional[str] = None) -> None:
    get_output_context().log_progress(message, details)


def log_debug(message: str) -> None:
    get_output_context().log_debug(message)


def log_intermediate_save(path: str, description: str) -> None:
    get_output_context().log_intermediate_save(path, description)


def log_completion(message: str, stats: Optional[Dict[str, Any]] = None) -> None:
    get_output_context().log_completion(message, stats)


def log_trace(event: str, **fields: Any) -> None:
    """
    Emit a structured diagnostic record at DEBUG level.

    The fields travel as ``extra`` attributes so ``StructuredFormatter``
    writes them as JSON keys. Callers only invoke this when the detector
    runs with ``debug=True``, so the record skips the package logger's
    level check; each handler (the package's own and the root's) still
    filters by its own level.
    """
    logger = get_logger()
    fn, lno, func, sinfo = logger.findCaller(stacklevel=2)
    record = logger.makeRecord(
        logger.name, logging.DEBUG, fn, lno, f"trace:{event}", None, None,
        func=func, extra={"trace_event": event, **fields}, sinfo=sinfo,
    )
    logger.handle(record)

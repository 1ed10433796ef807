"""
component_8_logging_config.py

Central logging configuration for Paintshop.

Provides:
- setup_logging(): console + rotating file handlers (general, errors, performance)
- get_logger(): StructuredLogger wrapper that renders `extra` context inline
- PerformanceLogger: context manager timing an operation

Library code only calls get_logger(). Handlers are installed once by the
command line entry point, so importing the solver never creates log files.
"""

import logging
import time
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

# ============================================================================
# CONSTANTS
# ============================================================================

LOG_DIR = Path(__file__).parent / "logs"
DEFAULT_LOG_FILE = LOG_DIR / "paintshop.log"
ERROR_LOG_FILE = LOG_DIR / "paintshop_errors.log"
PERFORMANCE_LOG_FILE = LOG_DIR / "performance.log"

PERFORMANCE_LOGGER_NAME = "paintshop.performance"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)-8s | %(message)s"

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# Attributes every LogRecord carries; anything else came in via `extra`
_RESERVED_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}

# Handlers installed by setup_logging(), removed again on the next call
_installed_handlers: Dict[str, list] = {}


class ContextFormatter(logging.Formatter):
    """Formatter that appends `extra` fields as `key=value` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
        }
        if not context:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{base} | {rendered}"


# ============================================================================
# STRUCTURED LOGGER
# ============================================================================


class StructuredLogger:
    """
    Thin wrapper around logging.Logger.

    Keeps the stdlib logger reachable as `.logger` and accepts structured
    context through `extra`.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def debug(self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs):
        self.logger.debug(msg, *args, extra=extra, **kwargs)

    def info(self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs):
        self.logger.info(msg, *args, extra=extra, **kwargs)

    def warning(
        self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs
    ):
        self.logger.warning(msg, *args, extra=extra, **kwargs)

    def error(self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs):
        self.logger.error(msg, *args, extra=extra, **kwargs)

    def exception(
        self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs
    ):
        self.logger.exception(msg, *args, extra=extra, **kwargs)

    def log_exception(self, exc: BaseException, message: str = "Exception", **context):
        """Log an exception with its full traceback at ERROR level."""
        extra = dict(context)
        extra["exception_type"] = type(exc).__name__
        extra["exception_message"] = str(exc)
        self.logger.error(
            f"{message}\n"
            + "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            extra=extra,
        )

    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)


def get_logger(name: str) -> StructuredLogger:
    """
    Return a StructuredLogger for `name`.

    Args:
        name: Usually `__name__` of the calling module
    """
    return StructuredLogger(logging.getLogger(name))


# ============================================================================
# SETUP
# ============================================================================


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def _replace_handlers(logger: logging.Logger, handlers: list) -> None:
    key = logger.name or "root"
    for handler in _installed_handlers.get(key, []):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    _installed_handlers[key] = handlers


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(ContextFormatter(LOG_FORMAT))
    return handler


def setup_logging(
    console_level: Union[int, str] = "WARNING",
    file_level: Union[int, str] = "DEBUG",
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
    performance_logging: bool = True,
) -> logging.Logger:
    """
    Configure the root logger.

    Safe to call repeatedly: handlers from a previous call are replaced.

    Args:
        console_level: Level for stderr output
        file_level: Level for paintshop.log
        log_dir: Directory for log files (default: LOG_DIR)
        enable_file_logging: Install rotating file handlers
        performance_logging: Route PerformanceLogger output to performance.log

    Returns:
        The configured root logger
    """
    console_level = _parse_level(console_level)
    file_level = _parse_level(file_level)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level) if enable_file_logging else console_level)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(ContextFormatter(CONSOLE_FORMAT))
    handlers = [console]

    perf_handlers = []
    if enable_file_logging:
        target_dir = Path(log_dir) if log_dir else LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_handler(target_dir / DEFAULT_LOG_FILE.name, file_level))
        handlers.append(_rotating_handler(target_dir / ERROR_LOG_FILE.name, logging.ERROR))
        if performance_logging:
            perf_handlers.append(
                _rotating_handler(target_dir / PERFORMANCE_LOG_FILE.name, logging.DEBUG)
            )

    _replace_handlers(root, handlers)

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
    # Timings already reach the main log via the caller's logger
    perf_logger.propagate = False
    perf_logger.setLevel(logging.INFO)
    _replace_handlers(perf_logger, perf_handlers)

    root.debug(
        "Logging configured",
        extra={
            "console_level": logging.getLevelName(console_level),
            "file_logging": enable_file_logging,
        },
    )
    return root


# ============================================================================
# PERFORMANCE LOGGING
# ============================================================================


class PerformanceLogger:
    """
    Context manager that logs the duration of an operation.

    Example:
        >>> with PerformanceLogger(logger.logger, "solve", width=5) as perf:
        ...     result = solver.solve(5, clauses)
        >>> perf.elapsed_ms
    """

    def __init__(
        self,
        logger: Union[logging.Logger, StructuredLogger],
        operation: str,
        **context: Any,
    ):
        if isinstance(logger, StructuredLogger):
            logger = logger.logger
        self.logger = logger
        self.operation = operation
        self.context = context
        self._start: Optional[float] = None
        self.elapsed_ms: float = 0.0

    def __enter__(self) -> "PerformanceLogger":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
        extra = dict(self.context)
        extra["operation"] = self.operation
        extra["duration_ms"] = round(self.elapsed_ms, 3)
        extra["success"] = exc_type is None

        self.logger.debug("Operation timed", extra=extra)
        logging.getLogger(PERFORMANCE_LOGGER_NAME).info("Operation timed", extra=extra)
        # Never swallow exceptions
        return False

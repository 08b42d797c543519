"""
Logging Utilities
=================

Handler setup and small helpers shared by every PulseDSP module.

Library modules only ever do ``logger = logging.getLogger(__name__)``;
the application (or a worker host) calls setup_logging() once to decide
where records go.

Helpers:
-------
- setup_logging / setup_logging_from_config: console and file handlers
- ColoredFormatter: level names colored on a TTY
- log_execution_time: timing decorator (used by the spectral transforms)
- LogLevel: temporary level inside a with-block
- log_exception: error record with traceback (used by the worker)

Example Usage:
    ```python
    from pulsedsp.utils.logging import get_logger, setup_logging

    setup_logging(level='DEBUG', log_file='logs/worker.log')

    logger = get_logger(__name__)
    logger.info("Worker started")
    ```

Author: PulseDSP
Date: 2024
"""

import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional, Union


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DETAILED_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - '
    '%(module)s.%(funcName)s:%(lineno)d - %(message)s'
)

# ANSI escape per level name
LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[1;31m',
}
RESET = '\033[0m'


def _resolve_level(level: Union[str, int]) -> int:
    """Map 'debug' / 'INFO' / 10 to a numeric logging level."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


# =============================================================================
# FORMATTER
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """
    Formatter that wraps the level name in an ANSI color.

    Colors are only used when stdout is a terminal. The record is copied
    before coloring so other handlers see the plain level name.
    """

    def __init__(self, fmt: str = DEFAULT_FORMAT, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors or record.levelname not in LEVEL_COLORS:
            return super().format(record)

        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{LEVEL_COLORS[record.levelname]}{record.levelname}{RESET}"
        return super().format(colored)


# =============================================================================
# HANDLER SETUP
# =============================================================================

def setup_logging(
    level: Union[str, int] = 'INFO',
    log_file: Optional[str] = None,
    console: bool = True,
    use_colors: bool = True,
    format_string: str = DEFAULT_FORMAT,
    detailed: bool = False
) -> None:
    """
    Replace the root handlers with console and/or file output.

    Args:
        level: Level name or number applied to the root logger and handlers
        log_file: Optional path; parent directories are created
        console: Write to stdout
        use_colors: Color level names on a terminal
        format_string: Record format
        detailed: Use DETAILED_FORMAT (module, function, line)
    """
    numeric_level = _resolve_level(level)
    fmt = DETAILED_FORMAT if detailed else format_string

    handlers = []
    if console:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(ColoredFormatter(fmt, use_colors))
        handlers.append(stream)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(fmt))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = []
    root.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        root.addHandler(handler)

    root.info(
        f"Logging configured: level={logging.getLevelName(numeric_level)}, "
        f"console={console}, file={log_file}"
    )


def setup_logging_from_config(settings: Dict[str, Any]) -> None:
    """
    Setup logging from the 'logging' configuration section.

    Args:
        settings: Dict with optional 'level', 'format' and 'file' keys
    """
    setup_logging(
        level=settings.get('level', 'INFO'),
        log_file=settings.get('file'),
        format_string=settings.get('format') or DEFAULT_FORMAT
    )


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module name (normally ``__name__``)."""
    return logging.getLogger(name)


def set_level(level: Union[str, int], logger_name: Optional[str] = None) -> None:
    """Set the level of one logger, or of the root logger when no name is given."""
    logging.getLogger(logger_name).setLevel(_resolve_level(level))


# =============================================================================
# HELPERS
# =============================================================================

def log_execution_time(logger: Optional[logging.Logger] = None,
                       level: int = logging.DEBUG):
    """
    Decorator recording how long each call takes.

    Args:
        logger: Target logger (default: the decorated function's module logger)
        level: Level of the timing record

    Example:
        >>> @log_execution_time()
        ... def dft_direct(signal):
        ...     ...
    """
    def decorator(func):
        target = logger or logging.getLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                if target.isEnabledFor(level):
                    elapsed = time.perf_counter() - started
                    target.log(level, f"{func.__name__} executed in {elapsed:.3f}s")

        return wrapper
    return decorator


class LogLevel:
    """
    Temporarily change a logger's level inside a with-block.

    Example:
        >>> with LogLevel('DEBUG', 'pulsedsp.filters'):
        ...     design_bandpass(0.5, 4.0, 30.0, 4)
    """

    def __init__(self, level: Union[str, int], logger_name: Optional[str] = None):
        self._logger = logging.getLogger(logger_name)
        self._level = _resolve_level(level)
        self._previous: Optional[int] = None

    def __enter__(self) -> 'LogLevel':
        self._previous = self._logger.level
        self._logger.setLevel(self._level)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self._logger.setLevel(self._previous)
        return False


def log_exception(logger: logging.Logger,
                  exc: Exception,
                  message: str = "An error occurred") -> None:
    """Log ``message: exc`` at ERROR with the exception's traceback attached."""
    logger.error(f"{message}: {exc}", exc_info=exc)

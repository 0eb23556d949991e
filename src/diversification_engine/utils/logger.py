"""
Logging Module
==============
Engine loggers: quiet colored console output, optional file output and a
timing decorator for the analysis entry point.

The engine writes nothing to disk unless a caller asks for a log file.
"""

import functools
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

ENGINE_PREFIX = "diversification_engine"

# Library default is WARNING: dropped holdings and data fallbacks only.
# The CLI raises it to INFO with -v.
CONSOLE_LEVEL = logging.WARNING
FILE_LEVEL = logging.DEBUG
LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# ================================================================================
# FORMATTER
# ================================================================================

class ColoredFormatter(logging.Formatter):
    """ANSI-colored level names for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # Color a copy so other handlers (file, caplog) see the plain levelname
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


# ================================================================================
# SETUP
# ================================================================================

def setup_logger(
    name: str,
    console_level: int = CONSOLE_LEVEL,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Configure an engine logger.

    Args:
        name: logger name, usually the module's __name__
        console_level: threshold of the stdout handler
        log_dir: when given, also log at DEBUG to <log_dir>/<name>_<date>.log

    Returns:
        The logger; calling again replaces its handlers instead of stacking them.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        log_file = path / f"{name.replace('.', '_')}_{datetime.now():%Y%m%d}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(FILE_LEVEL)
        file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Logger for an engine module: logger = get_logger(__name__)."""
    return setup_logger(module_name)


def set_console_level(level: int, prefix: str = ENGINE_PREFIX) -> None:
    """Change the console threshold of every engine logger already created."""
    for name, logger in logging.root.manager.loggerDict.items():
        if not name.startswith(prefix) or not isinstance(logger, logging.Logger):
            continue
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)


# ================================================================================
# TIMING
# ================================================================================

def log_performance(logger: logging.Logger):
    """Log the wall time of each call at DEBUG, and failures at ERROR before re-raising."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.error(f"{func.__name__} failed after {elapsed_ms:.1f}ms: {e}")
                raise
            logger.debug(f"{func.__name__} took {(time.perf_counter() - start) * 1000:.1f}ms")
            return result

        return wrapper
    return decorator

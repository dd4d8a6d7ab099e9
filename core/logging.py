"""
Logging module for BGG Stats.

- Colored console output on stderr (stdout carries the scraper's JSON result)
- Structured JSON records for production or when LOG_JSON is set
- Optional rotating file handler per service (LOG_TO_FILE)
- Structured context via ``extra=`` (game_id, correlation_id, ...)
"""

import logging
import sys
import json
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone
from typing import Optional
import os

from core.config import config


# Project root and logs directory
PROJECT_ROOT = Path(__file__).parent.parent
LOGS_DIR = PROJECT_ROOT / "logs"

# Attributes present on every LogRecord; anything else came in through ``extra=``
_RESERVED_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    One JSON object per line, extra fields collected under "extra".
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "correlation_id"):
            log_data["correlation_id"] = record.correlation_id

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and key != "correlation_id"
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Colored console formatter for development.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:8}{self.RESET}"
        return super().format(record)


def get_logger(
    service_name: str,
    log_level: Optional[str] = None,
    enable_console: bool = True,
    enable_file: Optional[bool] = None,
    enable_json: Optional[bool] = None,
) -> logging.Logger:
    """
    Get a configured logger for a service.

    Args:
        service_name: Name of the service (e.g., 'bgg-scraper', 'browser')
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Enable console output (stderr)
        enable_file: Enable rotating file output (defaults to LOG_TO_FILE)
        enable_json: Use JSON format (defaults to LOG_JSON or production env)

    Returns:
        Configured logger instance

    Usage:
        logger = get_logger('bgg-scraper')
        logger.info('Processing started', extra={'game_id': '174430'})
    """
    if log_level is None:
        log_level = config.LOG_LEVEL
    level = getattr(logging, log_level.upper(), logging.INFO)

    environment = os.getenv("ENVIRONMENT", "development").lower()
    is_production = environment == "production"

    if enable_json is None:
        enable_json = config.LOG_JSON or is_production
    if enable_file is None:
        enable_file = config.LOG_TO_FILE

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()  # Clear existing handlers to avoid duplicates

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        if enable_json:
            console_formatter = StructuredFormatter()
        else:
            console_formatter = ColoredConsoleFormatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if enable_file:
        LOGS_DIR.mkdir(exist_ok=True)
        log_file = LOGS_DIR / f"{service_name}.log"

        # 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)

        if enable_json:
            file_formatter = StructuredFormatter()
        else:
            file_formatter = logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def log_execution_time(logger: logging.Logger):
    """
    Decorator to log function execution time.

    Usage:
        @log_execution_time(logger)
        def run_batch(game_ids):
            ...
    """
    import functools
    import time

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                execution_time = time.time() - start_time
                logger.info(
                    f"{func.__name__} completed in {execution_time:.2f}s",
                    extra={"execution_time_seconds": execution_time},
                )
                return result
            except Exception:
                execution_time = time.time() - start_time
                logger.error(
                    f"{func.__name__} failed after {execution_time:.2f}s",
                    exc_info=True,
                    extra={"execution_time_seconds": execution_time},
                )
                raise

        return wrapper

    return decorator

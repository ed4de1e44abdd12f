"""
Logging utilities for TastyTray application.

Sets up console and rotating file output for the ``tastytray`` logger tree and
provides a timing context for multi-step operations such as ingredient
reconciliation and the post-login data load.
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Optional

from .config import get_config

ROOT_LOGGER_NAME = "tastytray"


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up application logging with both console and file output.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Uses config if not provided.
        log_file: Log file path. Uses config if not provided. Empty string disables file output.

    Returns:
        Configured application logger
    """
    config = get_config()

    log_level = (log_level or config.log_level).upper()
    log_file = config.log_file if log_file is None else log_file

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Streamlit re-runs the script on every interaction
    logger.handlers.clear()

    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(logging.INFO)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logger.level)
        logger.addHandler(file_handler)

    for noisy in ("requests", "urllib3", "streamlit"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info(f"Logging initialized - Level: {log_level}, File: {log_file or 'disabled'}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module, nested under the application logger.

    Args:
        name: Logger name (usually __name__)
    """
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class ContextLogger:
    """Context manager for logging operations with timing"""

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.log(self.level, f"Completed: {self.operation} ({duration:.2f}s)")
        else:
            self.logger.error(f"Failed: {self.operation} ({duration:.2f}s) - {exc_val}")
        # never suppress
        return False

    def info(self, message: str):
        self.logger.info(f"[{self.operation}] {message}")

    def warning(self, message: str):
        self.logger.warning(f"[{self.operation}] {message}")

    def error(self, message: str):
        self.logger.error(f"[{self.operation}] {message}")


def log_operation(logger: logging.Logger, operation: str, level: int = logging.INFO):
    """Create a context logger for an operation"""
    return ContextLogger(logger, operation, level)

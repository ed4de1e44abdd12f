"""
Utilities package for TastyTray application.

Contains configuration, logging setup, and shared helpers.
"""

from .config import Config, get_config
from .logger import setup_logging, get_logger, log_operation

__all__ = [
    'Config',
    'get_config',
    'setup_logging',
    'get_logger',
    'log_operation'
]

"""Shared utilities for CLI commands.

This module contains utilities used by multiple CLI command modules.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

import click
from rich.console import Console
from rich.logging import RichHandler

from course_cache.infrastructure.config import CourseCacheConfig
from course_cache.infrastructure.database.course_store import CourseStore
from course_cache.infrastructure.logging.log_paths import get_main_log_path as get_log_file_path

# Shared console for CLI diagnostics - uses stderr to keep stdout clean
cli_console = Console(file=sys.stderr)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(log_level_name: str, console_logging: bool = False):
    """Configure logging for course_cache.

    By default, logs go to a file in the system-appropriate log directory.
    Console logging can be enabled for debugging.

    Args:
        log_level_name: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_logging: If True, also log to console via Rich
    """
    log_level = logging.getLevelName(log_level_name.upper())
    log_file = get_log_file_path()

    # Clear any existing handlers and close them properly
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # File handler with rotation (10 MB max, keep 3 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    if console_logging:
        console_handler = RichHandler(
            console=cli_console,
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(log_level)
        root_logger.addHandler(console_handler)

    root_logger.setLevel(logging.DEBUG)  # Let handlers filter
    logging.getLogger("course_cache").setLevel(log_level)


def get_config(ctx: click.Context) -> CourseCacheConfig:
    return ctx.obj["CONFIG"]


def get_store(ctx: click.Context) -> CourseStore:
    config = get_config(ctx)
    return CourseStore(config.db_path, timeout=config.database.busy_timeout)
